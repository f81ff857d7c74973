import logging


jar_logger = logging.getLogger('rfcjar.jar')
store_logger = logging.getLogger('rfcjar.store')
parser_logger = logging.getLogger('rfcjar.parser')
