import logging

"""
Create a global logger instance.
"""

logger = logging.getLogger("clankerkit")
logger.propagate = False
logger.setLevel(logging.INFO)
logger.addHandler(logging.StreamHandler())
