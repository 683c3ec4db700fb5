from hproxy.config import Config
from hproxy.logger import init_logger

# Initialize logger
logger = init_logger(Config)
