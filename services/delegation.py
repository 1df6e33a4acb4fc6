"""
Delegation tree builder.

A citizen who delegates inherits the vote found at the end of their chain of
trust. Walking `truster -> trustee` from a root citizen ends in one of three
ways:

1. the walk reaches a citizen with a direct vote: that citizen is the caster
   and every hop walked becomes a DelegationNode annotated with it;
2. the walk reaches a citizen with no trustee who has not voted: no caster;
3. the walk revisits a citizen (a cycle): no caster.

Chains without a caster produce no nodes at all, so downstream code never has
to special-case dead ends or cycles. Everything here is a pure function of
the direct voters and a `truster -> trustee` mapping.
"""

from typing import Collection, Dict, List, Mapping, NamedTuple, Optional

from models.vote import VoteValue


class DelegationNode(NamedTuple):
    """One resolved hop: `truster` delegates to `trustee`, whose chain ends at `caster`."""
    truster: int
    trustee: int
    caster: int


class ProxyVote(NamedTuple):
    """Vote assigned to `author` by inheriting `caster`'s direct `value`."""
    author: int
    caster: int
    value: VoteValue


def build_delegation_tree(
    root: int,
    edges: Mapping[int, int],
    voters: Collection[int],
    resolved: Optional[Dict[int, Optional[int]]] = None,
) -> List[DelegationNode]:
    """
    Walk the delegation chain from `root` and return its resolved hops.

    Args:
        root: Citizen to start from
        edges: `truster -> trustee` mapping
        voters: Citizens holding a direct vote
        resolved: Optional memo shared between walks; maps each citizen seen
            so far to its caster, or None when its chain has no caster

    Returns:
        One DelegationNode per hop, empty when the chain has no caster or
        `root` voted directly
    """
    if resolved is None:
        resolved = {}

    chain = [root]
    visited = {root}
    # A walk can never visit more citizens than the graph holds
    limit = len(edges) + 1
    current = root

    while True:
        if current in voters:
            caster = current
            break
        if current in resolved:
            caster = resolved[current]
            break
        trustee = edges.get(current)
        if trustee is None or trustee in visited or len(chain) >= limit:
            caster = None
            break
        chain.append(trustee)
        visited.add(trustee)
        current = trustee

    for citizen in chain:
        resolved.setdefault(citizen, caster)

    if caster is None:
        return []
    return [DelegationNode(truster, trustee, caster)
            for truster, trustee in zip(chain, chain[1:])]


def build_delegation_nodes(edges: Mapping[int, int], voters: Collection[int]) -> List[DelegationNode]:
    """
    Resolve the delegation chain of every citizen with an outgoing edge.

    Overlapping walks resolve a shared citizen identically, so the output
    holds exactly one node per delegating citizen that reaches a caster,
    ordered by truster.
    """
    resolved: Dict[int, Optional[int]] = {}
    nodes: Dict[int, DelegationNode] = {}

    for truster in sorted(edges):
        for node in build_delegation_tree(truster, edges, voters, resolved):
            nodes.setdefault(node.truster, node)

    return [nodes[truster] for truster in sorted(nodes)]


def resolve_proxy_votes(
    direct_votes: Mapping[int, VoteValue],
    edges: Mapping[int, int],
) -> Dict[int, ProxyVote]:
    """
    Compute the proxy votes a recount assigns.

    Args:
        direct_votes: `citizen -> value` for every direct vote on the law
        edges: `truster -> trustee` mapping of the trust graph

    Returns:
        `citizen -> ProxyVote` for every delegating citizen whose chain ends at
        a direct voter. Direct voters never appear in the result.
    """
    proxies = {}
    for node in build_delegation_nodes(edges, direct_votes.keys()):
        if node.truster in direct_votes:
            continue
        proxies[node.truster] = ProxyVote(node.truster, node.caster, direct_votes[node.caster])
    return proxies

