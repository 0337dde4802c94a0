"""
Shared fixtures: a deterministic ledger clock, hardhat test accounts and
freshly deployed registries.
"""

import pytest
from eth_account import Account

from rejuve_registry import Ledger, RegistryConfig, deploy_registries
from rejuve_registry import signer as signing

# Hardhat / anvil default dev keys
PRIVATE_KEYS = [
    "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80",
    "0x59c6995e998f97a5a0044966f0945389dc9e86dae88c7a8412f4603b6b78690d",
    "0x5de4111afa1a4b94908f83103eb1f1706367c2e68ca870fc3fb9a804cdab365a",
    "0x7c852118294e51e653712a81e05800f419141751be58f605c371e15141b007a6",
    "0x47e179ec197488593b187f80a00eb0da91f1b9d0b13f8733639f19c30a34926a",
    "0x8b3a350cf5c34c9194ca85829a2df0ec3153be0318b5e2d3348e872092edffba",
    "0x92db14e403b83dfe3df233f83dfa3a0d7096f21ca9b0d6d6b8d88b2b4ec1564e",
    "0x4bbbf85ce3377467afe5d46f804f221813b2bb87f24d81f60f1fcdbf7cbf4356",
]

CHAIN_ID = 31337
START_TIME = 1_700_000_000
KYC = "0x7924fbcf9a7f76ca5412304f2bf47e326b638e9e7c42ecad878ed9c22a8f1428"
TOKEN_URI = "/tokenURIHere"
DATA_HASH = "0x622b1092273fe26f6a2c370a5c34a690337e7f802f2fa5006b40790bd3f7d69b"
DATA_HASH_2 = "0x622b1092273fe26f6a2c370a5c34a690337e7f802f2fa5006b40790bd3f7d68c"


class FakeClock:
    """Manually advanced ledger clock"""

    def __init__(self, now: int = START_TIME):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: int) -> None:
        self.now += seconds


class Accounts:
    def __init__(self):
        (
            self.owner,
            self.addr1,
            self.addr2,
            self.sponsor,
            self.lab,
            self.researcher,
            self.distributor,
            self.outsider,
        ) = [Account.from_key(key) for key in PRIVATE_KEYS]


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def ledger(clock):
    return Ledger(clock=clock)


@pytest.fixture
def accounts():
    return Accounts()


@pytest.fixture
def config():
    return RegistryConfig(chain_id=CHAIN_ID)


@pytest.fixture
def registries(ledger, accounts, config):
    return deploy_registries(ledger, accounts.owner.address, accounts.sponsor.address, config)


@pytest.fixture
def identity_token(registries):
    return registries[0]


@pytest.fixture
def data_mgt(registries):
    return registries[1]


@pytest.fixture
def agreements(registries):
    return registries[2]


@pytest.fixture
def sign_identity(identity_token):
    """Sign an Identity request for an account against the deployed identity registry"""
    def _sign(account, nonce, signer_address=None, kyc=KYC, uri=TOKEN_URI):
        return signing.identity_request_signature(
            kyc,
            signer_address or account.address,
            uri,
            nonce,
            identity_token.chain_id,
            identity_token.address,
            account.key,
        )
    return _sign


@pytest.fixture
def create_identity(identity_token, accounts, sign_identity):
    """Sponsor-create an identity for an account, returning its token id"""
    def _create(account, nonce):
        signature = sign_identity(account, nonce)
        return identity_token.create_identity(
            accounts.sponsor.address, signature, KYC, account.address, TOKEN_URI, nonce
        )
    return _create


@pytest.fixture
def sign_data(data_mgt):
    def _sign(account, dhash, nonce, signer_address=None):
        return signing.data_submission_signature(
            signer_address or account.address, dhash, nonce, data_mgt.chain_id, data_mgt.address, account.key
        )
    return _sign


@pytest.fixture
def sign_permission(data_mgt):
    def _sign(account, requester_id, dhash, product_id, nonce, expiration, dataowner=None):
        return signing.access_permission_signature(
            dataowner or account.address,
            requester_id,
            dhash,
            product_id,
            nonce,
            expiration,
            data_mgt.chain_id,
            data_mgt.address,
            account.key,
        )
    return _sign


@pytest.fixture
def sign_agreement(agreements):
    def _sign(account, terms, nonce, distributor=None):
        return signing.agreement_signature(
            distributor or account.address, terms, nonce, agreements.chain_id, agreements.address, account.key
        )
    return _sign
