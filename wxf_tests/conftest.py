import os

import structlog

from wxf.conf import UNITTESTS_SETTINGS_FILEPATH

os.environ['WXF_CONFIG_YAML'] = os.environ.get('WXF_TEST_CONFIG_YAML', UNITTESTS_SETTINGS_FILEPATH)

# send events through the stdlib logging module, so they are captured by pytest and never printed to stdout
structlog.configure(
    processors=[
        structlog.stdlib.add_log_level,
        structlog.processors.KeyValueRenderer(key_order=['event']),
    ],
    logger_factory=structlog.stdlib.LoggerFactory(),
    wrapper_class=structlog.stdlib.BoundLogger,
)
