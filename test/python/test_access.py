import pytest

from rejuve_registry import DEFAULT_ADMIN_ROLE, PAUSER_ROLE, SIGNER_ROLE
from rejuve_registry.errors import Paused, Unauthorized


def test_deployment_roles(identity_token, data_mgt, agreements, accounts):
    for registry in (identity_token, data_mgt, agreements):
        assert registry.has_role(DEFAULT_ADMIN_ROLE, accounts.owner.address)
        assert registry.has_role(PAUSER_ROLE, accounts.owner.address)
        assert not registry.has_role(DEFAULT_ADMIN_ROLE, accounts.sponsor.address)

    assert identity_token.has_role(SIGNER_ROLE, accounts.sponsor.address)
    assert data_mgt.has_role(SIGNER_ROLE, accounts.sponsor.address)
    assert not agreements.has_role(SIGNER_ROLE, accounts.sponsor.address)


def test_admin_grants_and_revokes(identity_token, accounts, ledger):
    relayer = accounts.researcher.address
    identity_token.grant_role(accounts.owner.address, SIGNER_ROLE, relayer)
    assert identity_token.has_role(SIGNER_ROLE, relayer)
    assert relayer in identity_token.access.get_role_members(SIGNER_ROLE)

    identity_token.revoke_role(accounts.owner.address, SIGNER_ROLE, relayer)
    assert not identity_token.has_role(SIGNER_ROLE, relayer)

    names = [e.name for e in ledger.get_events(source=identity_token.name)]
    assert names[-2:] == ["RoleGranted", "RoleRevoked"]


def test_no_self_escalation(identity_token, accounts):
    sponsor = accounts.sponsor.address
    with pytest.raises(Unauthorized):
        identity_token.grant_role(sponsor, DEFAULT_ADMIN_ROLE, sponsor)
    with pytest.raises(Unauthorized):
        identity_token.grant_role(sponsor, PAUSER_ROLE, sponsor)
    assert not identity_token.has_role(DEFAULT_ADMIN_ROLE, sponsor)
    assert not identity_token.has_role(PAUSER_ROLE, sponsor)


def test_non_admin_cannot_revoke(identity_token, accounts):
    with pytest.raises(Unauthorized):
        identity_token.revoke_role(accounts.addr1.address, SIGNER_ROLE, accounts.sponsor.address)
    assert identity_token.has_role(SIGNER_ROLE, accounts.sponsor.address)


def test_renounce_only_for_self(identity_token, accounts):
    sponsor = accounts.sponsor.address
    with pytest.raises(Unauthorized):
        identity_token.renounce_role(accounts.owner.address, SIGNER_ROLE, sponsor)
    identity_token.renounce_role(sponsor, SIGNER_ROLE, sponsor)
    assert not identity_token.has_role(SIGNER_ROLE, sponsor)


def test_unauthorized_message_names_account_and_role(identity_token, accounts):
    with pytest.raises(Unauthorized) as exc:
        identity_token.access.check_role(accounts.addr1.address, PAUSER_ROLE)
    assert accounts.addr1.address.lower() in exc.value.message
    assert PAUSER_ROLE.hex() in exc.value.message


# ---------------------------------------------------------------------------
# Pause / unpause
# ---------------------------------------------------------------------------


def test_pause_unpause(identity_token, accounts):
    identity_token.pause(accounts.owner.address)
    assert identity_token.paused
    identity_token.unpause(accounts.owner.address)
    assert not identity_token.paused


def test_pause_requires_pauser(identity_token, accounts):
    with pytest.raises(Unauthorized):
        identity_token.pause(accounts.addr1.address)
    identity_token.pause(accounts.owner.address)
    with pytest.raises(Unauthorized):
        identity_token.unpause(accounts.addr1.address)
    assert identity_token.paused


def test_pause_is_per_registry(identity_token, data_mgt, accounts):
    data_mgt.pause(accounts.owner.address)
    assert data_mgt.paused
    assert not identity_token.paused


def test_double_pause_and_unpause_rejected(identity_token, accounts):
    with pytest.raises(Paused):
        identity_token.unpause(accounts.owner.address)
    identity_token.pause(accounts.owner.address)
    with pytest.raises(Paused):
        identity_token.pause(accounts.owner.address)


def test_granted_pauser_can_pause(agreements, accounts):
    agreements.grant_role(accounts.owner.address, PAUSER_ROLE, accounts.researcher.address)
    agreements.pause(accounts.researcher.address)
    assert agreements.paused


def test_supports_access_control_interface(identity_token, data_mgt, agreements):
    for registry in (identity_token, data_mgt, agreements):
        assert registry.supports_interface("0x7965db0b")
        assert registry.supports_interface(bytes.fromhex("01ffc9a7"))
    assert not data_mgt.supports_interface("0x80ac58cd")
    assert not agreements.supports_interface("0x7965db0b00")
