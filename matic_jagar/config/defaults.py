"""
Fixed names and locations for the matic-jagar configuration file.
"""

from typing import Dict, Tuple

# Base name of the config file, without extension
CONFIG_NAME = "config"

# Hidden application directory under the user's home
APP_DIR = ".matic-jagar"

# Sub-directory of APP_DIR holding the config file
CONFIG_SUBDIR = "config"

# Probed in this order inside each search directory
SUPPORTED_EXTENSIONS: Tuple[str, ...] = ("json", "toml", "yaml", "yml")

# Environment variables overriding values from the file (dotted external keys)
ENV_VAR_MAPPING: Dict[str, str] = {
    'MATIC_JAGAR_TG_BOT_TOKEN': 'telegram.tg_bot_token',
    'MATIC_JAGAR_TG_CHAT_ID': 'telegram.tg_chat_id',
    'MATIC_JAGAR_SENDGRID_TOKEN': 'sendgrid.sendgrid_token',
    'MATIC_JAGAR_INFLUXDB_USERNAME': 'influxdb.username',
    'MATIC_JAGAR_INFLUXDB_PASSWORD': 'influxdb.password',
    'MATIC_JAGAR_ETH_RPC_ENDPOINT': 'rpc_and_lcd_endpoints.eth_rpc_endpoint',
}

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
