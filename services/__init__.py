"""
Services package for Liquid Law.

This package contains the trust graph, delegation resolution, recount engine
and the law-facing business logic built on top of them.
"""

__all__ = [
    'comment_service',
    'delegation',
    'law_service',
    'law_state',
    'law_store',
    'mailer',
    'recount_service',
    'tag_service',
    'trust_graph',
]

__version__ = '1.0.0'
