from .citizen import Citizen
from .trust import TrustEdge
from .tag import Tag
from .vote import Vote, VoteValue
from .law import Law, LawStatus
from .comment import Comment

__all__ = ['Citizen', 'TrustEdge', 'Tag', 'Vote', 'VoteValue', 'Law', 'LawStatus', 'Comment']
