"""
ENS registry client.

Wraps the registry contract behind explicit, name-based methods. Every
method hashes its name to a node, normalizes its addresses, then makes
exactly one call (read) or send (write) through the transport.

Any failure from the transport (RPC error, revert, decode failure, failed
receipt) is raised as RegistryCallReverted with the original exception kept
on `.cause`. Input errors (HashingInputError, AddressFormatError) are raised
before the transport is touched.
"""
import logging

from naming.utils.namehash import labelhash, namehash, subname_node
from naming.utils.web3_utils import (
  REGISTRY_ABI,
  RESOLVER_ABI,
  ContractTransport,
  get_contract,
  get_w3,
  is_zero_address,
  normalize_address,
  registry_address,
)

logger = logging.getLogger('wide_event')


class RegistryCallReverted(Exception):
  """Raised when a registry call or transaction does not succeed."""

  def __init__(self, method: str, cause: Exception | None = None):
    self.method = method
    self.cause = cause
    message = f'Registry call {method} reverted'
    if cause is not None:
      message += f': {cause}'
    super().__init__(message)


class RegistryClient:
  """
  Name-based access to an ENS registry.

  Args:
    w3: Web3 instance (default: provider for chain_id from settings)
    address: Registry address (default: the registry for chain_id)
    transport: Object with call(method, args) and
               send(method, args, tx_config) (default: ContractTransport
               over the registry handle)
    chain_id: Chain to use when w3 / address are not given
  """

  def __init__(self, w3=None, address=None, transport=None, chain_id: int | None = None):
    self.w3 = w3 if w3 is not None else get_w3(chain_id)
    self._address = normalize_address(address) if address else registry_address(chain_id)
    self._registry = get_contract(self.w3, REGISTRY_ABI, self._address)
    self.transport = transport if transport is not None else ContractTransport(self.w3, self._registry)

  @property
  def address(self) -> str:
    return self._address

  @property
  def registry(self):
    return self._registry

  # ── transport wrappers ──

  def _call(self, method: str, *args):
    try:
      result = self.transport.call(method, args)
    except Exception as e:
      logger.warning(f'registry.{method} call failed: {e}')
      raise RegistryCallReverted(method, e) from e
    logger.debug(f'registry.{method} -> {result!r}')
    return result

  def _send(self, method: str, target: str, *args, tx_config: dict | None = None):
    try:
      receipt = self.transport.send(method, args, tx_config)
    except Exception as e:
      logger.warning(f'registry.{method}({target!r}) send failed: {e}')
      raise RegistryCallReverted(method, e) from e
    tx_hash = receipt.get('transactionHash') if hasattr(receipt, 'get') else None
    if isinstance(tx_hash, (bytes, bytearray)):
      tx_hash = '0x' + bytes(tx_hash).hex()
    logger.info(f'registry.{method}({target!r}) tx={tx_hash or "-"}')
    return receipt

  # ── owner ──

  def get_owner(self, name: str) -> str:
    """Owner address of `name`."""
    return self._call('owner', namehash(name))

  def set_owner(self, name: str, address, tx_config: dict | None = None):
    """Transfer ownership of `name` to `address`. Returns the receipt."""
    node = namehash(name)
    return self._send('setOwner', name, node, normalize_address(address),
                      tx_config=tx_config)

  # ── ttl ──

  def get_ttl(self, name: str) -> int:
    """Record TTL of `name`, in seconds."""
    return self._call('ttl', namehash(name))

  def set_ttl(self, name: str, ttl: int, tx_config: dict | None = None):
    node = namehash(name)
    return self._send('setTTL', name, node, ttl, tx_config=tx_config)

  # ── subnodes ──

  def set_subnode_owner(self, name: str, label: str, address, tx_config: dict | None = None):
    """
    Create or reassign `label.name`, owned by `address`.

    `label` may be the plain label or its 0x-prefixed 32-byte hash.
    """
    node = namehash(name)
    label_hash = labelhash(label)
    receipt = self._send('setSubnodeOwner', name, node, label_hash, normalize_address(address),
                         tx_config=tx_config)
    logger.info(f'registry subnode {label}.{name} node=0x{subname_node(node, label).hex()}')
    return receipt

  def set_subnode_record(
    self,
    name: str,
    label: str,
    owner,
    resolver,
    ttl: int,
    tx_config: dict | None = None,
  ):
    """Set owner, resolver and TTL of `label.name` in one transaction."""
    node = namehash(name)
    label_hash = labelhash(label)
    receipt = self._send(
      'setSubnodeRecord',
      name,
      node,
      label_hash,
      normalize_address(owner),
      normalize_address(resolver),
      ttl,
      tx_config=tx_config,
    )
    logger.info(f'registry subnode {label}.{name} node=0x{subname_node(node, label).hex()}')
    return receipt

  # ── operators ──

  def set_approval_for_all(self, operator, approved: bool, tx_config: dict | None = None):
    """Approve or revoke `operator` for all records of the sender."""
    operator = normalize_address(operator)
    return self._send('setApprovalForAll', operator, operator, bool(approved),
                      tx_config=tx_config)

  def is_approved_for_all(self, owner, operator) -> bool:
    return self._call('isApprovedForAll', normalize_address(owner), normalize_address(operator))

  # ── records ──

  def record_exists(self, name: str) -> bool:
    return self._call('recordExists', namehash(name))

  def get_resolver(self, name: str):
    """
    Resolver handle for `name`.

    Bound to the resolver address the registry reports, or an unbound
    resolver factory if the registry reports the zero address.
    """
    address = self._call('resolver', namehash(name))
    try:
      if is_zero_address(address):
        return get_contract(self.w3, RESOLVER_ABI)
      return get_contract(self.w3, RESOLVER_ABI, address)
    except ValueError as e:
      logger.warning(f'registry.resolver returned a bad address: {address!r}')
      raise RegistryCallReverted('resolver', e) from e

  def set_resolver(self, name: str, address, tx_config: dict | None = None):
    node = namehash(name)
    return self._send('setResolver', name, node, normalize_address(address),
                      tx_config=tx_config)
