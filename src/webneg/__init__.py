from webneg.dec import accepts, get_format
from webneg.exc import HTTPNotAcceptable
from webneg.mimetable import MimeTable
from webneg.negotiate import Chosen, Negotiator, Refused, negotiate
from webneg.request import RequestContext

__all__ = [
    'accepts', 'get_format', 'HTTPNotAcceptable', 'MimeTable', 'Chosen',
    'Negotiator', 'Refused', 'negotiate', 'RequestContext',
]

__version__ = '1.0.0'
