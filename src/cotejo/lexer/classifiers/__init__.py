"""Line classifier mixins for the Cotejo lexer.

Each mixin inspects a line (pure logic, no position mutation) and reports
where a lexically recognizable construct starts.
"""

from cotejo.lexer.classifiers.fence import FenceClassifierMixin
from cotejo.lexer.classifiers.prefix import PrefixClassifierMixin
from cotejo.lexer.classifiers.table import TableClassifierMixin

__all__ = [
    "FenceClassifierMixin",
    "PrefixClassifierMixin",
    "TableClassifierMixin",
]
