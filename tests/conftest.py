import os
from typing import Any, Dict, List, Tuple

import django
import pytest
from eth_utils import keccak
from web3 import Web3

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings')
django.setup()

from naming.utils.registry import RegistryClient  # noqa: E402
from naming.utils.web3_utils import ZERO_ADDRESS  # noqa: E402


REGISTRY = '0x00000000000C2E074eC69A0dFb2997BA6C7d2e1e'
ALICE = '0x5aAeb6053F3E94C9b9A09f33669435E7Ef1BeAed'
BOB = '0xfB6916095ca1df60bB79Ce92cE3Ea74c37c5d359'
RESOLVER = '0xdbF03B407c01E7cD3CBea99509d93f8DDDC8C6FB'


class FakeRegistryTransport:
  """
  In-memory registry behind the call/send transport interface.

  Mirrors the registry contract closely enough for name-level scenarios:
  records keyed by node, subnodes derived as keccak(node + label), operator
  approvals keyed by the sender in tx_config['from'].
  """

  def __init__(self) -> None:
    self.calls: List[Tuple[str, tuple]] = []
    self.sent: List[Tuple[str, tuple, Any]] = []
    self.records: Dict[bytes, Dict[str, Any]] = {}
    self.approvals: Dict[Tuple[str, str], bool] = {}
    self._tx_count = 0

  def _record(self, node: bytes) -> Dict[str, Any]:
    return self.records.setdefault(node, {'owner': ZERO_ADDRESS, 'resolver': ZERO_ADDRESS, 'ttl': 0})

  def call(self, method: str, args=()):
    self.calls.append((method, tuple(args)))
    if method == 'owner':
      return self.records.get(args[0], {}).get('owner', ZERO_ADDRESS)
    if method == 'resolver':
      return self.records.get(args[0], {}).get('resolver', ZERO_ADDRESS)
    if method == 'ttl':
      return self.records.get(args[0], {}).get('ttl', 0)
    if method == 'recordExists':
      return args[0] in self.records
    if method == 'isApprovedForAll':
      return self.approvals.get((args[0], args[1]), False)
    raise AssertionError(f'unexpected call {method}')

  def send(self, method: str, args=(), tx_config=None):
    self.sent.append((method, tuple(args), tx_config))
    if method == 'setOwner':
      self._record(args[0])['owner'] = args[1]
    elif method == 'setResolver':
      self._record(args[0])['resolver'] = args[1]
    elif method == 'setTTL':
      self._record(args[0])['ttl'] = args[1]
    elif method == 'setSubnodeOwner':
      self._record(keccak(args[0] + args[1]))['owner'] = args[2]
    elif method == 'setSubnodeRecord':
      record = self._record(keccak(args[0] + args[1]))
      record['owner'], record['resolver'], record['ttl'] = args[2], args[3], args[4]
    elif method == 'setApprovalForAll':
      sender = (tx_config or {}).get('from', ZERO_ADDRESS)
      self.approvals[(sender, args[0])] = args[1]
    else:
      raise AssertionError(f'unexpected send {method}')

    self._tx_count += 1
    return {'status': 1, 'transactionHash': self._tx_count.to_bytes(32, 'big')}


class FailingTransport:
  """Transport whose every call and send blows up."""

  def __init__(self, exc: Exception | None = None) -> None:
    self.exc = exc or ConnectionError('node unreachable')

  def call(self, method, args=()):
    raise self.exc

  def send(self, method, args=(), tx_config=None):
    raise self.exc


@pytest.fixture
def w3():
  # Never connects; only used to build contract handles.
  return Web3(Web3.HTTPProvider('http://127.0.0.1:8545'))


@pytest.fixture
def transport():
  return FakeRegistryTransport()


@pytest.fixture
def client(w3, transport):
  return RegistryClient(w3=w3, address=REGISTRY, transport=transport)
