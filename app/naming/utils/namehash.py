"""
ENS namehash utilities.

Maps dotted names to 32-byte registry nodes and labels to label hashes.

  namehash("") = 0x0000...0000
  namehash("eth") = keccak256(namehash("") + keccak256("eth"))
  namehash("alice.eth") = keccak256(namehash("eth") + keccak256("alice"))

Names are hashed byte-for-byte as given: no case folding or Unicode
normalization happens here.
"""
import re

from eth_utils import keccak
from hexbytes import HexBytes


ROOT_NODE = b'\x00' * 32

_LABEL_HASH_RE = re.compile(r'0x[0-9a-fA-F]{64}')


class HashingInputError(ValueError):
  """Raised when a name or label cannot be hashed."""
  pass


def _to_text(value) -> str:
  if isinstance(value, (bytes, bytearray)):
    try:
      return bytes(value).decode('utf-8')
    except UnicodeDecodeError as e:
      raise HashingInputError(f'Name is not valid UTF-8: {value!r}') from e
  if not isinstance(value, str):
    raise HashingInputError(f'Expected a str name, got {type(value).__name__}')
  return value


def _label_bytes(label: str) -> bytes:
  try:
    return label.encode('utf-8')
  except UnicodeEncodeError as e:
    raise HashingInputError(f'Label is not encodable as UTF-8: {label!r}') from e


def is_label_hash(value) -> bool:
  """True if value is a strict 32-byte hex string (0x + 64 hex digits)."""
  return isinstance(value, str) and _LABEL_HASH_RE.fullmatch(value) is not None


def labelhash(label) -> bytes:
  """
  Resolve a label to its 32-byte label hash.

  A label that is already a strict 32-byte hex string is used verbatim;
  anything else is hashed as keccak256 of its UTF-8 bytes.

  Args:
    label: The label (e.g., "alice") or a pre-computed "0x..." label hash

  Returns:
    32-byte label hash

  Raises:
    HashingInputError: on undecodable input, an empty label or a label
                       containing '.'
  """
  label = _to_text(label)
  if is_label_hash(label):
    return bytes(HexBytes(label))
  if not label:
    raise HashingInputError('Empty label')
  if '.' in label:
    raise HashingInputError(f'Label contains a separator: {label!r}')
  return keccak(_label_bytes(label))


def namehash(name) -> bytes:
  """
  Compute the ENS namehash for a dotted name.

  Labels are folded right to left, starting from the root node.

  Args:
    name: Dotted ENS name (e.g., "alice.eth"), str or UTF-8 bytes

  Returns:
    32-byte namehash

  Raises:
    HashingInputError: on undecodable input or an empty label
  """
  name = _to_text(name)
  node = ROOT_NODE
  if not name:
    return node

  labels = name.split('.')
  if any(not label for label in labels):
    raise HashingInputError(f'Empty label in name: {name!r}')

  for label in reversed(labels):
    node = keccak(node + keccak(_label_bytes(label)))
  return node


def subname_node(parent_node: bytes, label) -> bytes:
  """
  Compute the node of `label` directly under `parent_node`.

  Equivalent to the registry's own subnode derivation:
    keccak256(abi.encodePacked(parentNode, labelhash))
  """
  return keccak(bytes(parent_node) + labelhash(label))
