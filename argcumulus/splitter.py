"""
argcumulus flag splitter: the lexical pass over raw tokens.

The splitter knows nothing about namespaces; it only pairs flag tokens with the
specs they are bound to and with their value text, so the resolver can work on
ordered records instead of raw strings.

Accepted spellings
- "--name value" / "-n value": the next token is the value, whatever it looks like.
- "--name=value" / "-n=value": inline value.
- "-nvalue": attached value for a single-dash alias of a value-taking spec.
- "--no-name": negation of a Bool bound to "--name" (when "--no-name" itself is not bound).
- "--": every later token is a plain value, even when flag-shaped.

Unbound flag tokens are kept verbatim (spec=None) so they can end up in the
leftovers or be claimed by a greedy positional.
"""
import collections

from .arguments import Kind
from .utils import *


class Token(collections.namedtuple("Token", ("flag", "value", "spec", "raw", "negated"), defaults=(False,))):
    """
    One lexical unit produced by split().

    Fields
    - flag: the flag spelling ("--name", "-n"), or None for a plain value.
    - value: the value text (inline, attached or from the next token), or None.
    - spec: the ArgumentSpec bound to the flag, or None (plain value or unbound flag).
    - raw: tuple of the original tokens this record was built from.
    - negated: True for a "--no-<name>" spelling.
    """
    __slots__ = ()

    @property
    def plain(self):
        """
        A positional candidate: a non-flag token, or any token after "--".
        """
        return self.flag is None

    @property
    def unbound(self):
        """
        A flag-shaped token no spec claims.
        """
        return self.flag is not None and self.spec is None


def split(tokens, registry, /):
    """
    Yield Token records for a token sequence, preserving order.

    Parameters
    - tokens: iterable of str.
    - registry: SpecRegistry used to bind flags (lookup_by_token).

    A value-taking flag at the very end of the sequence is yielded with
    value=None; deciding whether that is an error is up to the caller.
    """
    tokens = list(tokens)
    index = 0
    terminated = False

    while index < len(tokens):
        token = tokens[index]
        index += 1

        if terminated or not flagged(token):
            yield Token(None, token, None, (token,))
            continue

        if token == "--":
            terminated = True
            continue

        name, separator, inline = token.partition("=")
        spec = registry.lookup_by_token(name)

        if spec is None and not separator and not token.startswith("--") and len(token) > 2:
            # -nvalue
            short = registry.lookup_by_token(token[:2])
            if short is not None and not short.kind.valueless:
                yield Token(token[:2], token[2:], short, (token,))
                continue

        if spec is None and not separator and name.startswith("--no-"):
            bound = registry.lookup_by_token("--" + name[len("--no-"):])
            if bound is not None and bound.kind is Kind.BOOL:
                yield Token(name, None, bound, (token,), True)
                continue

        if spec is None:
            yield Token(token, None, None, (token,))
        elif separator:
            yield Token(name, inline, spec, (token,))
        elif spec.kind.valueless:
            yield Token(name, None, spec, (token,))
        elif index < len(tokens):
            yield Token(name, tokens[index], spec, (token, tokens[index]))
            index += 1
        else:
            yield Token(name, None, spec, (token,))


__all__ = (
    "Token",
    "split",
)
