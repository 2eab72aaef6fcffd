"""Reference list aggregation across mapped claims."""

from truthtrollers_evidence.data import MappedClaim, Reference


def dedupe_references(items: list[MappedClaim]) -> list[Reference]:
    """Flatten every pick into a reference and merge references by URL.

    References keep the order in which their URL was first seen. The claims
    citing a URL are merged as an insertion-ordered set. The first non-empty
    pick title becomes the ``content_name``; a URL never given a title is
    named by the URL itself.
    """
    by_url: dict[str, Reference] = {}
    for item in items:
        for pick in item.picks:
            if not pick.url:
                continue
            ref = by_url.get(pick.url)
            if ref is None:
                ref = Reference(url=pick.url, content_name=pick.title or "")
                by_url[pick.url] = ref
            elif not ref.content_name and pick.title:
                ref.content_name = pick.title
            if item.claim not in ref.claims:
                ref.claims.append(item.claim)

    for ref in by_url.values():
        if not ref.content_name:
            ref.content_name = ref.url
    return list(by_url.values())
