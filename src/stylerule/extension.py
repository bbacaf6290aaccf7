"""Pull declarations from a feed stylesheet into a rule body."""

from __future__ import annotations

from stylerule.model import Stylesheet


def extend(feed: Stylesheet | None, selector: str) -> str:
    """Return the declarations of the first feed rule whose prelude is *selector*.

    Declarations are rendered one per line (``color: red;``, with
    ``!important`` kept where set), ready to drop into another rule's body.
    Only the first matching rule is used. Returns an empty string when there
    is no feed or nothing matches.
    """
    if feed is None:
        return ""

    for rule in feed.rules:
        if rule.prelude != selector:
            continue
        return "\n".join(decl.to_css(with_important=True) for decl in rule.declarations)

    return ""
