"""Constants for solsend."""

# Economic constants
LAMPORTS_PER_SOL = 1_000_000_000  # Smallest unit: 1 lamport = 1e-9 SOL
U64_MAX = 2**64 - 1  # Balances and amounts are u64 on chain

# Key constants
SECRET_KEY_LENGTH = 64  # 32-byte Ed25519 seed + 32-byte public key
SEED_LENGTH = 32
PUBLIC_KEY_LENGTH = 32

# Network constants
DEFAULT_RPC_URL = "https://api.devnet.solana.com"
DEFAULT_REQUEST_TIMEOUT = 30  # HTTP timeout per RPC call, seconds
DEFAULT_CONFIRMATION_TIMEOUT = 60  # Seconds to wait for confirmation
CONFIRMATION_POLL_INTERVAL = 0.5  # Seconds between signature status polls
DEFAULT_COMMITMENT = "confirmed"

# Config defaults
DEFAULT_CONFIG_PATH = "config/config.toml"
ENV_PREFIX = "SOLSEND_"
