"""
Registry record lookup view.

Endpoint: /naming/records/{name}/

Reads owner, resolver, TTL and existence of a name from the registry and
returns them as JSON. Read-only; nothing here sends transactions.
"""
import logging

from django.http import JsonResponse
from django.views.decorators.http import require_GET

from naming.utils.namehash import HashingInputError, namehash
from naming.utils.registry import RegistryCallReverted, RegistryClient

logger = logging.getLogger('wide_event')


@require_GET
def record_lookup(request, name):
  """
  Return the registry record for `name`.

  JSON: { name, node, owner, resolver, ttl, exists }
  `resolver` is null when the registry has no resolver for the name.
  """
  try:
    node = namehash(name)
  except HashingInputError as e:
    return JsonResponse({'error': str(e)}, status=400)

  try:
    client = RegistryClient()
  except ValueError as e:
    logger.exception('Registry client not configured')
    return JsonResponse({'error': str(e)}, status=500)

  try:
    owner = client.get_owner(name)
    resolver = client.get_resolver(name)
    ttl = client.get_ttl(name)
    exists = client.record_exists(name)
  except RegistryCallReverted as e:
    return JsonResponse({'error': str(e)}, status=502)

  logger.info(f'record_lookup name={name} exists={exists}')

  return JsonResponse({
    'name': name,
    'node': '0x' + node.hex(),
    'owner': owner,
    'resolver': resolver.address,
    'ttl': ttl,
    'exists': exists,
  })
