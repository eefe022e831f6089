from .line import Line, LineInput, LinePatch, DueLine, MasteryLevel
from .text import Text, TextCreate, TextPatch, AnnotatedText, Category
from .session import Session

__all__ = ['Line', 'LineInput', 'LinePatch', 'DueLine', 'MasteryLevel', 'Text', 'TextCreate', 'TextPatch', 'AnnotatedText', 'Category', 'Session']
