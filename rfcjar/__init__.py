__version__ = '1.0.0'

# This relies on each of the submodules having an __all__ variable.

from .cookie import *  # noqa
from .cookiejar import *  # noqa
from .dates import *  # noqa
from .errors import *  # noqa
from .helpers import *  # noqa
from .store import *  # noqa
from .suffix import *  # noqa


__all__ = (cookie.__all__ +  # noqa
           cookiejar.__all__ +  # noqa
           dates.__all__ +  # noqa
           errors.__all__ +  # noqa
           helpers.__all__ +  # noqa
           store.__all__ +  # noqa
           suffix.__all__)  # noqa
