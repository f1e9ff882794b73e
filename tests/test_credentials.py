from airtable_automation.credentials import env_name_for_ref, resolve_credential_refs


def test_env_name_for_ref() -> None:
    assert env_name_for_ref("airtable/pat") == "AIRTABLE_SECRET_AIRTABLE_PAT"
    assert env_name_for_ref("team-a.airtable.token") == "AIRTABLE_SECRET_TEAM_A_AIRTABLE_TOKEN"


def test_credential_refs_resolution_from_env(monkeypatch) -> None:
    monkeypatch.setenv("AIRTABLE_SECRET_AIRTABLE_PAT", "pat-value")
    monkeypatch.delenv("AIRTABLE_SECRET_AIRTABLE_MISSING", raising=False)
    monkeypatch.setattr("airtable_automation.credentials._from_keychain", lambda ref: None)

    resolution = resolve_credential_refs({"api_key": "airtable/pat", "other": "airtable/missing"})
    assert resolution.resolved == {"api_key": "pat-value"}
    assert resolution.unresolved == {"other": "airtable/missing"}


def test_blank_env_value_counts_as_unresolved(monkeypatch) -> None:
    monkeypatch.setenv("AIRTABLE_SECRET_AIRTABLE_PAT", "   ")
    monkeypatch.setattr("airtable_automation.credentials._from_keychain", lambda ref: None)
    assert resolve_credential_refs({"api_key": "airtable/pat"}).unresolved == {"api_key": "airtable/pat"}
