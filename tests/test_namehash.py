import pytest
from eth_utils import keccak

from naming.utils.namehash import (
  ROOT_NODE,
  HashingInputError,
  is_label_hash,
  labelhash,
  namehash,
  subname_node,
)

# namehash("eth")
ETH_NODE = bytes.fromhex('93cdeb708b7545dc668eb9280176169d1c33cfd8ed6f04690a0bcc88a93fc4ae')


def test_empty_name_is_root():
  assert namehash('') == b'\x00' * 32
  assert namehash('') == ROOT_NODE


def test_eth_vector():
  assert namehash('eth').hex() == '93cdeb708b7545dc668eb9280176169d1c33cfd8ed6f04690a0bcc88a93fc4ae'
  assert namehash('eth') == ETH_NODE


def test_foo_eth_vector():
  expected = keccak(namehash('eth') + keccak(b'foo'))
  assert namehash('foo.eth') == expected
  assert namehash('foo.eth').hex() == 'de9b09fd7c5f901e23a3f19fecc54828e9c848539801e86591bd9801b019f84f'


def test_addr_reverse_vector():
  assert namehash('addr.reverse').hex() == '91d1777781884d03a6757a803996e38de2a42967fb37eeaca72729271025a9e2'


def test_deterministic():
  assert namehash('alice.eth') == namehash('alice.eth')
  assert len(namehash('a.b.c.d.eth')) == 32


def test_siblings_do_not_collide():
  assert namehash('alice.eth') != namehash('bob.eth')
  assert namehash('alice.eth') != namehash('eth')


def test_bytes_input_matches_str():
  assert namehash(b'alice.eth') == namehash('alice.eth')


def test_names_are_hashed_byte_literal():
  # no case folding
  assert namehash('ETH') != namehash('eth')
  assert namehash('ö.eth') == keccak(ETH_NODE + keccak('ö'.encode('utf-8')))


@pytest.mark.parametrize('bad', ['.eth', 'eth.', 'alice..eth', '.'])
def test_empty_labels_rejected(bad):
  with pytest.raises(HashingInputError):
    namehash(bad)


def test_invalid_utf8_bytes_rejected():
  with pytest.raises(HashingInputError):
    namehash(b'\xff\xfe.eth')


def test_lone_surrogate_rejected():
  with pytest.raises(HashingInputError):
    namehash('\ud800.eth')


def test_non_text_rejected():
  with pytest.raises(HashingInputError):
    namehash(42)


def test_hashing_input_error_is_value_error():
  assert issubclass(HashingInputError, ValueError)


def test_labelhash_plain_label():
  assert labelhash('eth').hex() == '4f5b812789fc606be1b3b16908db13fc7a9adf7ca72641f84d75b47069d3d7f0'
  assert labelhash('alice') == keccak(b'alice')


def test_labelhash_hex_used_verbatim():
  value = '0x' + keccak(b'alice').hex()
  assert labelhash(value) == keccak(b'alice')

  upper = '0x' + 'AB' * 32
  assert labelhash(upper) == bytes.fromhex('ab' * 32)


@pytest.mark.parametrize('value', ['0x1234', 'ab' * 32, '0x' + 'zz' * 32, '0x' + 'ab' * 33])
def test_labelhash_non_strict_hex_is_hashed(value):
  assert not is_label_hash(value)
  assert labelhash(value) == keccak(value.encode('utf-8'))


def test_labelhash_hex_with_trailing_newline_is_not_strict():
  value = '0x' + keccak(b'alice').hex() + '\n'
  assert not is_label_hash(value)
  assert labelhash(value) == keccak(value.encode('utf-8'))


@pytest.mark.parametrize('bad', ['', 'a.b', '.alice', 'alice.'])
def test_labelhash_rejects_bad_structure(bad):
  with pytest.raises(HashingInputError):
    labelhash(bad)


def test_labelhash_rejects_unencodable():
  with pytest.raises(HashingInputError):
    labelhash('\udfff')


def test_subname_node_matches_namehash():
  assert subname_node(ETH_NODE, 'foo') == namehash('foo.eth')
  assert subname_node(namehash('foo.eth'), 'bar') == namehash('bar.foo.eth')
