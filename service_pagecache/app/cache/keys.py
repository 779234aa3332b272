"""
Physical Redis key generation for Drupal cache ids.
"""

PAGE_BIN = "page"
TAG_BIN = "cachetags"


def resolve_key(cid: str, bin: str, template: str) -> str:
    """
    Expand a cache id template into the Redis key.

    Only the first ``{bin}`` and the first ``{cid}`` are substituted, verbatim.
    A template missing either placeholder is used as-is for that part.
    """
    return template.replace("{bin}", bin, 1).replace("{cid}", cid, 1)
