"""Configuration constants for maci-deployments library."""

# Logical contract names, as recorded in the address manifest
SIGN_UP_TOKEN = "SignUpToken"
INITIAL_VOICE_CREDIT_PROXY = "InitialVoiceCreditProxy"
SIGN_UP_TOKEN_GATEKEEPER = "SignUpTokenGatekeeper"
FREE_FOR_ALL_GATEKEEPER = "FreeForAllGatekeeper"
MIMC = "MiMC"
BATCH_UPDATE_STATE_TREE_VERIFIER = "BatchUpdateStateTreeVerifier"
QUAD_VOTE_TALLY_VERIFIER = "QuadraticVoteTallyVerifier"
MACI = "MACI"

# Maps logical contract names to compiled artifact names
CONTRACT_ARTIFACTS = {
    SIGN_UP_TOKEN: "SignUpToken",
    INITIAL_VOICE_CREDIT_PROXY: "ConstantInitialVoiceCreditProxy",
    SIGN_UP_TOKEN_GATEKEEPER: "SignUpTokenGatekeeper",
    FREE_FOR_ALL_GATEKEEPER: "FreeForAllGatekeeper",
    MIMC: "MiMC",
    BATCH_UPDATE_STATE_TREE_VERIFIER: "BatchUpdateStateTreeVerifier",
    QUAD_VOTE_TALLY_VERIFIER: "QuadVoteTallyVerifier",
    MACI: "MACI",
}

# Libraries with no dependencies that must exist before MACI is deployed
SHARED_LIBRARIES = (MIMC, BATCH_UPDATE_STATE_TREE_VERIFIER, QUAD_VOTE_TALLY_VERIFIER)

# Gatekeeper kinds
GATEKEEPER_TOKEN = "token"
GATEKEEPER_FREE_FOR_ALL = "free-for-all"
GATEKEEPER_CONTRACTS = {
    GATEKEEPER_TOKEN: SIGN_UP_TOKEN_GATEKEEPER,
    GATEKEEPER_FREE_FOR_ALL: FREE_FOR_ALL_GATEKEEPER,
}

# Constructor-argument dependencies between logical contracts.
# MACI's gatekeeper dependency is filled in per run from the gatekeeper kind.
CONTRACT_DEPENDENCIES = {
    SIGN_UP_TOKEN: frozenset(),
    INITIAL_VOICE_CREDIT_PROXY: frozenset(),
    SIGN_UP_TOKEN_GATEKEEPER: frozenset({SIGN_UP_TOKEN}),
    FREE_FOR_ALL_GATEKEEPER: frozenset(),
    MIMC: frozenset(),
    BATCH_UPDATE_STATE_TREE_VERIFIER: frozenset(),
    QUAD_VOTE_TALLY_VERIFIER: frozenset(),
    MACI: frozenset(
        {
            MIMC,
            BATCH_UPDATE_STATE_TREE_VERIFIER,
            QUAD_VOTE_TALLY_VERIFIER,
            INITIAL_VOICE_CREDIT_PROXY,
        }
    ),
}

# Baby Jubjub curve parameters (twisted Edwards form over the BN254 scalar field)
SNARK_FIELD_SIZE = (
    21888242871839275222246405745257275088548364400416034343698204186575808495617
)
BABYJUB_A = 168700
BABYJUB_D = 168696
BABYJUB_BASE8 = (
    5299619240641551281634865583518297030282874472190772894086521144482721001553,
    16950150798460657717958625567821834550301663161624707787222815936182638968203,
)

# Defaults for DeploymentConfig fields
DEFAULT_CONFIG = {
    "state_tree_depth": 4,
    "message_tree_depth": 4,
    "vote_option_tree_depth": 2,
    "quad_vote_tally_batch_size": 4,
    "message_batch_size": 4,
    "vote_options_max_leaf_index": 3,
    "sign_up_duration_in_seconds": 3600,
    "voting_duration_in_seconds": 3600,
    "initial_voice_credit_balance": 100,
    "coordinator_priv_key": (
        2222222222263902553431241761119057960280734584214105336279476766401963593688
    ),
    "coordinator_pub_key": None,
    "sign_up_gatekeeper": GATEKEEPER_TOKEN,
}

# Chain connection
DEFAULT_RPC_URL = "http://localhost:8545"
RPC_URL_ENV = "MACI_RPC_URL"
DEFAULT_GAS_LIMIT = 10_000_000
DEFAULT_POLL_INTERVAL = 1.0
DEFAULT_RECEIPT_TIMEOUT = 300.0

# Address store file names
STORE_FILE_NAME = "contractAddresses.json"
BACKUP_FILE_NAME = "contractAddresses.old.json"
