# fleet_gps_sync/common/__init__.py

from fleet_gps_sync.common.addresses import extract_city_state, format_city_state
from fleet_gps_sync.common.logger import setup_logger
from fleet_gps_sync.common.truststore_context import build_truststore_ssl_context

__all__: list[str] = [
    'build_truststore_ssl_context',
    'extract_city_state',
    'format_city_state',
    'setup_logger',
]
