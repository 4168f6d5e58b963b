"""
Web3 utilities for the name registry client.

Server-side Ethereum interactions:
- Provider and contract handle helpers (get_w3, get_contract)
- Address normalization (normalize_address)
- The call/send transport used by RegistryClient (call_view, send_tx,
  ContractTransport)

Writes are signed locally by the backend wallet (BACKEND_PRIVATE_KEY) when
one is configured, otherwise they are handed to the node's own accounts.
"""
import logging

from django.conf import settings
from eth_account import Account
from eth_utils import is_address, is_checksum_address, is_checksum_formatted_address
from web3 import Web3

logger = logging.getLogger('wide_event')


# ─────────────────────────────────────────────────────────────────────────────
# Chain IDs
# ─────────────────────────────────────────────────────────────────────────────

CHAIN_IDS = {
  1: 'mainnet',
  11155111: 'sepolia',
  17000: 'holesky',
}

# ─────────────────────────────────────────────────────────────────────────────
# ENS registry deployments by chain ID (ENSRegistryWithFallback)
# ─────────────────────────────────────────────────────────────────────────────

REGISTRY_ADDRESSES = {
  1:        '0x00000000000C2E074eC69A0dFb2997BA6C7d2e1e',
  11155111: '0x00000000000C2E074eC69A0dFb2997BA6C7d2e1e',
  17000:    '0x00000000000C2E074eC69A0dFb2997BA6C7d2e1e',
}

# ─────────────────────────────────────────────────────────────────────────────
# RPC URL settings key by chain ID
# ─────────────────────────────────────────────────────────────────────────────

CHAIN_RPC_SETTINGS = {
  1:        'MAINNET_RPC_URL',
  11155111: 'SEPOLIA_RPC_URL',
  17000:    'HOLESKY_RPC_URL',
}

ZERO_ADDRESS = '0x' + '00' * 20

DEFAULT_GAS = 200_000

# Fee fields; if the caller sets any of them we do not add a gasPrice.
_FEE_KEYS = ('gasPrice', 'maxFeePerGas', 'maxPriorityFeePerGas')


# ─────────────────────────────────────────────────────────────────────────────
# Contract ABIs (minimal fragments: only functions the client calls)
# ─────────────────────────────────────────────────────────────────────────────

REGISTRY_ABI = [
  # owner(bytes32 node) → address
  {
    'inputs': [{'name': 'node', 'type': 'bytes32'}],
    'name': 'owner',
    'outputs': [{'name': '', 'type': 'address'}],
    'stateMutability': 'view',
    'type': 'function',
  },
  # resolver(bytes32 node) → address
  {
    'inputs': [{'name': 'node', 'type': 'bytes32'}],
    'name': 'resolver',
    'outputs': [{'name': '', 'type': 'address'}],
    'stateMutability': 'view',
    'type': 'function',
  },
  # ttl(bytes32 node) → uint64
  {
    'inputs': [{'name': 'node', 'type': 'bytes32'}],
    'name': 'ttl',
    'outputs': [{'name': '', 'type': 'uint64'}],
    'stateMutability': 'view',
    'type': 'function',
  },
  # recordExists(bytes32 node) → bool
  {
    'inputs': [{'name': 'node', 'type': 'bytes32'}],
    'name': 'recordExists',
    'outputs': [{'name': '', 'type': 'bool'}],
    'stateMutability': 'view',
    'type': 'function',
  },
  # isApprovedForAll(address owner, address operator) → bool
  {
    'inputs': [
      {'name': 'owner', 'type': 'address'},
      {'name': 'operator', 'type': 'address'},
    ],
    'name': 'isApprovedForAll',
    'outputs': [{'name': '', 'type': 'bool'}],
    'stateMutability': 'view',
    'type': 'function',
  },
  # setOwner(bytes32 node, address owner)
  {
    'inputs': [
      {'name': 'node', 'type': 'bytes32'},
      {'name': 'owner', 'type': 'address'},
    ],
    'name': 'setOwner',
    'outputs': [],
    'stateMutability': 'nonpayable',
    'type': 'function',
  },
  # setResolver(bytes32 node, address resolver)
  {
    'inputs': [
      {'name': 'node', 'type': 'bytes32'},
      {'name': 'resolver', 'type': 'address'},
    ],
    'name': 'setResolver',
    'outputs': [],
    'stateMutability': 'nonpayable',
    'type': 'function',
  },
  # setTTL(bytes32 node, uint64 ttl)
  {
    'inputs': [
      {'name': 'node', 'type': 'bytes32'},
      {'name': 'ttl', 'type': 'uint64'},
    ],
    'name': 'setTTL',
    'outputs': [],
    'stateMutability': 'nonpayable',
    'type': 'function',
  },
  # setSubnodeOwner(bytes32 node, bytes32 label, address owner) → bytes32
  {
    'inputs': [
      {'name': 'node', 'type': 'bytes32'},
      {'name': 'label', 'type': 'bytes32'},
      {'name': 'owner', 'type': 'address'},
    ],
    'name': 'setSubnodeOwner',
    'outputs': [{'name': '', 'type': 'bytes32'}],
    'stateMutability': 'nonpayable',
    'type': 'function',
  },
  # setSubnodeRecord(bytes32 node, bytes32 label, address owner, address resolver, uint64 ttl)
  {
    'inputs': [
      {'name': 'node', 'type': 'bytes32'},
      {'name': 'label', 'type': 'bytes32'},
      {'name': 'owner', 'type': 'address'},
      {'name': 'resolver', 'type': 'address'},
      {'name': 'ttl', 'type': 'uint64'},
    ],
    'name': 'setSubnodeRecord',
    'outputs': [],
    'stateMutability': 'nonpayable',
    'type': 'function',
  },
  # setApprovalForAll(address operator, bool approved)
  {
    'inputs': [
      {'name': 'operator', 'type': 'address'},
      {'name': 'approved', 'type': 'bool'},
    ],
    'name': 'setApprovalForAll',
    'outputs': [],
    'stateMutability': 'nonpayable',
    'type': 'function',
  },
]

RESOLVER_ABI = [
  # supportsInterface(bytes4 interfaceID) → bool
  {
    'inputs': [{'name': 'interfaceID', 'type': 'bytes4'}],
    'name': 'supportsInterface',
    'outputs': [{'name': '', 'type': 'bool'}],
    'stateMutability': 'view',
    'type': 'function',
  },
  # addr(bytes32 node) → address
  {
    'inputs': [{'name': 'node', 'type': 'bytes32'}],
    'name': 'addr',
    'outputs': [{'name': '', 'type': 'address'}],
    'stateMutability': 'view',
    'type': 'function',
  },
  # name(bytes32 node) → string
  {
    'inputs': [{'name': 'node', 'type': 'bytes32'}],
    'name': 'name',
    'outputs': [{'name': '', 'type': 'string'}],
    'stateMutability': 'view',
    'type': 'function',
  },
  # text(bytes32 node, string key) → string
  {
    'inputs': [
      {'name': 'node', 'type': 'bytes32'},
      {'name': 'key', 'type': 'string'},
    ],
    'name': 'text',
    'outputs': [{'name': '', 'type': 'string'}],
    'stateMutability': 'view',
    'type': 'function',
  },
  # contenthash(bytes32 node) → bytes
  {
    'inputs': [{'name': 'node', 'type': 'bytes32'}],
    'name': 'contenthash',
    'outputs': [{'name': '', 'type': 'bytes'}],
    'stateMutability': 'view',
    'type': 'function',
  },
  # setAddr(bytes32 node, address a)
  {
    'inputs': [
      {'name': 'node', 'type': 'bytes32'},
      {'name': 'a', 'type': 'address'},
    ],
    'name': 'setAddr',
    'outputs': [],
    'stateMutability': 'nonpayable',
    'type': 'function',
  },
  # setText(bytes32 node, string key, string value)
  {
    'inputs': [
      {'name': 'node', 'type': 'bytes32'},
      {'name': 'key', 'type': 'string'},
      {'name': 'value', 'type': 'string'},
    ],
    'name': 'setText',
    'outputs': [],
    'stateMutability': 'nonpayable',
    'type': 'function',
  },
]


class AddressFormatError(ValueError):
  """Raised when an address argument cannot be normalized."""

  def __init__(self, value):
    self.value = value
    super().__init__(f'Invalid address: {value!r}')


class TransactionFailed(Exception):
  """Raised when a mined transaction reports a failed status."""

  def __init__(self, tx_hash: str, receipt=None):
    self.tx_hash = tx_hash
    self.receipt = receipt
    super().__init__(f'Transaction {tx_hash} failed (status 0)')


# ─────────────────────────────────────────────────────────────────────────────
# Address helpers
# ─────────────────────────────────────────────────────────────────────────────

def normalize_address(raw) -> str:
  """
  Validate and checksum an address.

  Accepts 0x-prefixed hex (any case, but mixed case must carry a valid
  EIP-55 checksum) or 20 raw bytes.

  Returns:
    EIP-55 checksummed address string

  Raises:
    AddressFormatError: If the value is not a valid address
  """
  if not is_address(raw):
    raise AddressFormatError(raw)
  # is_address does not check EIP-55 on every eth-utils release
  if is_checksum_formatted_address(raw) and not is_checksum_address(raw):
    raise AddressFormatError(raw)
  return Web3.to_checksum_address(raw)


def is_zero_address(address) -> bool:
  """True for a missing or all-zero address."""
  if not address:
    return True
  if isinstance(address, (bytes, bytearray)):
    return not any(address)
  return int(address, 16) == 0


# ─────────────────────────────────────────────────────────────────────────────
# Web3 provider helpers
# ─────────────────────────────────────────────────────────────────────────────

def default_chain_id() -> int:
  return int(getattr(settings, 'ENS_CHAIN_ID', 1))


def get_w3(chain_id: int | None = None):
  """Get a Web3 instance connected to the given chain."""
  if chain_id is None:
    chain_id = default_chain_id()
  rpc_setting = CHAIN_RPC_SETTINGS.get(chain_id)
  if not rpc_setting:
    raise ValueError(f'Unsupported chain ID: {chain_id}. '
                     f'Available: {", ".join(CHAIN_IDS.values())}')

  rpc_url = getattr(settings, rpc_setting, '')
  if not rpc_url:
    raise ValueError(f'{rpc_setting} not configured in settings')

  return Web3(Web3.HTTPProvider(rpc_url))


def registry_address(chain_id: int | None = None) -> str:
  """
  Registry address for a chain.

  ENS_REGISTRY_ADDRESS in settings wins over the known deployments, so
  local devnets and forks can point at their own registry.
  """
  if chain_id is None:
    chain_id = default_chain_id()
  address = getattr(settings, 'ENS_REGISTRY_ADDRESS', '') or REGISTRY_ADDRESSES.get(chain_id)
  if not address:
    raise ValueError(f'No ENS registry for chain {chain_id}; '
                     f'set ENS_REGISTRY_ADDRESS')
  return normalize_address(address)


def get_contract(w3, abi, address=None):
  """
  Get a web3 contract handle.

  With an address the handle is bound and can be called directly; without
  one it is an unbound contract factory that can be bound later with
  `handle(address=...)`.
  """
  if address is None:
    return w3.eth.contract(abi=abi)
  return w3.eth.contract(address=normalize_address(address), abi=abi)


# ─────────────────────────────────────────────────────────────────────────────
# Contract interaction helpers
# ─────────────────────────────────────────────────────────────────────────────

def call_view(contract, fn_name: str, *args):
  """
  Call a view/pure function on a contract. Returns the decoded result.

  Args:
    contract: Bound web3 contract handle
    fn_name: Function name on the contract
    *args: Positional arguments for the contract function
  """
  fn = getattr(contract.functions, fn_name)
  return fn(*args).call()


def _backend_account():
  private_key = getattr(settings, 'BACKEND_PRIVATE_KEY', '')
  if not private_key:
    return None, None
  return Account.from_key(private_key), private_key


def send_tx(w3, contract, fn_name: str, *args, tx_config: dict | None = None):
  """
  Build, sign, send a transaction and wait for its receipt.

  If BACKEND_PRIVATE_KEY is configured and tx_config does not name another
  sender, the transaction is signed locally by the backend wallet. Otherwise
  it goes through `transact()` and the node signs for `tx_config['from']`.

  Args:
    w3: Web3 instance
    contract: Bound web3 contract handle
    fn_name: Function name on the contract
    *args: Positional arguments for the contract function
    tx_config: Transaction fields (from, gas, gasPrice, nonce, ...);
               these override the defaults

  Returns:
    The transaction receipt

  Raises:
    TransactionFailed: If the transaction was mined with status 0
  """
  tx_config = dict(tx_config or {})
  fn = getattr(contract.functions, fn_name)(*args)

  account, private_key = _backend_account()
  sender = tx_config.get('from')
  use_backend = account is not None and (
    not sender or str(sender).lower() == account.address.lower()
  )

  if use_backend:
    params = {
      'from': account.address,
      'nonce': w3.eth.get_transaction_count(account.address),
      'gas': int(getattr(settings, 'ENS_DEFAULT_GAS', DEFAULT_GAS)),
      'chainId': w3.eth.chain_id,
    }
    if not any(key in tx_config for key in _FEE_KEYS):
      params['gasPrice'] = w3.eth.gas_price
    params.update(tx_config)
    params['from'] = account.address

    tx = fn.build_transaction(params)
    signed_tx = w3.eth.account.sign_transaction(tx, private_key)
    tx_hash = w3.eth.send_raw_transaction(signed_tx.raw_transaction)
  else:
    tx_hash = fn.transact(tx_config)

  receipt = w3.eth.wait_for_transaction_receipt(tx_hash)
  logger.info(f'send_tx({fn_name}) tx={tx_hash.hex()} '
              f'status={receipt["status"]}')
  if receipt['status'] == 0:
    raise TransactionFailed(tx_hash.hex(), receipt)
  return receipt


class ContractTransport:
  """
  The call/send pair RegistryClient talks through, bound to one contract.

  Any object with the same two methods can stand in for it.
  """

  def __init__(self, w3, contract):
    self.w3 = w3
    self.contract = contract

  def call(self, method: str, args=()):
    return call_view(self.contract, method, *args)

  def send(self, method: str, args=(), tx_config: dict | None = None):
    return send_tx(self.w3, self.contract, method, *args, tx_config=tx_config)
