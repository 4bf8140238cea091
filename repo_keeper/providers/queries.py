"""Builders for OneDev search queries.

The strings follow OneDev's own query grammar and are passed to the server
verbatim; nothing here parses or validates them.
"""


def _quote(value: str) -> str:
    return f'"{value}"'


def owned_by(user: str) -> str:
    return f"owned by {_quote(user)}"


def children_of(namespace: str) -> str:
    return f"children of {_quote(namespace)}"


def name_is(name: str) -> str:
    return f'"Name" is {_quote(name)}'


def name_is_child_of(name: str, namespace: str) -> str:
    return f"{name_is(name)} and {children_of(namespace)}"


def on_branch(branch: str) -> str:
    """Commit query selecting commits reachable from a branch."""
    return f"branch({branch})"
