"""
Configuration models for matic-jagar.

Every field is bound to an explicit key in the config file through its
alias. Constraint tags live beside the field and are checked on demand by
``Config.validate_config`` rather than at construction time, so a config
can be loaded first and validated with some sections excluded.
"""

import logging
from pathlib import Path
from typing import Annotated, Any, Dict, Iterable, List, Optional, Tuple

from pydantic import (
    BaseModel, ConfigDict, Field, WrapValidator, field_serializer, field_validator
)
from pydantic import ValidationError as PydanticValidationError

from ..errors import MappingError, ValidationError, Violation
from .validation import RULES_KEY, collect_violations

logger = logging.getLogger(__name__)


def setting(alias: str, default: Any = "", rules: str = "", **kwargs: Any) -> Any:
    """Declare a field with its file key and constraint tags"""
    extra = {RULES_KEY: rules} if rules else None
    if "default_factory" in kwargs:
        return Field(alias=alias, json_schema_extra=extra, **kwargs)
    return Field(default=default, alias=alias, json_schema_extra=extra, **kwargs)


def _keep_verbatim(value: Any, handler: Any) -> Any:
    # Skip whitespace stripping; numbers still go through str coercion
    if isinstance(value, str):
        return value
    return handler(value)


# Credentials are used exactly as written
Secret = Annotated[str, WrapValidator(_keep_verbatim)]


class Section(BaseModel):
    """Base for all config sections"""
    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        str_strip_whitespace=True,
        coerce_numbers_to_str=True,
        extra="ignore"
    )


class Endpoints(Section):
    """Base URLs of the chain RPC and LCD services"""
    eth_rpc_endpoint: str = setting("eth_rpc_endpoint", rules="required,url")
    bor_rpc_endpoint: str = setting("bor_rpc_end_point", rules="required,url")
    bor_external_rpc: str = setting("bor_external_rpc", rules="url")
    heimdall_rpc_endpoint: str = setting("heimdall_rpc_endpoint", rules="required,url")
    heimdall_lcd_endpoint: str = setting("heimdall_lcd_endpoint", rules="required,url")
    heimdall_external_rpc: str = setting("heimdall_external_rpc", rules="url")
    polygon_staking_endpoint: str = setting("polygon_staking_endpoint", rules="url")


class ValDetails(Section):
    """Identity of the monitored validator"""
    # Used for balances, proposals and missed block checks
    validator_hex_address: str = setting("validator_hex_addr", rules="required,hexadecimal")
    # Used for latest block and current proposer lookups
    signer_address: str = setting("signer_address", rules="required,hexadecimal")
    # Moniker shown in alert messages
    validator_name: str = setting("validator_name", rules="required")
    stake_manager_contract: str = setting("stake_manager_contract", rules="hexadecimal")
    # Number of the validator on staking.polygon.technology
    validator_number: str = setting("validator_number", rules="numeric")


class EnableAlerts(Section):
    """Delivery channel switches"""
    enable_telegram_alerts: bool = setting("enable_telegram_alerts", default=False)
    enable_email_alerts: bool = setting("enable_email_alerts", default=False)


class RegularStatusAlerts(Section):
    """Time slots (HH:MM) at which a status report is sent, in order"""
    alert_timings: List[str] = setting(
        "alert_timings", rules="dive,timeslot", default_factory=list
    )


_TRUE_STRINGS = {"yes", "true", "on", "1"}
_FALSE_STRINGS = {"no", "false", "off", "0", ""}


class AlerterPreferences(Section):
    """Per-alert on/off switches, written as "yes"/"no" in the file"""
    balance_change_alerts: bool = setting("balance_change_alerts", default=False)
    voting_power_alerts: bool = setting("voting_power_alerts", default=False)
    proposal_alerts: bool = setting("proposal_alerts", default=False)
    block_diff_alerts: bool = setting("block_diff_alerts", default=False)
    missed_block_alerts: bool = setting("missed_block_alerts", default=False)
    num_peers_alerts: bool = setting("num_peers_alerts", default=False)
    node_sync_alert: bool = setting("node_sync_alert", default=False)
    node_status_alert: bool = setting("node_status_alert", default=False)
    eth_low_balance_alert: bool = setting("eth_low_balance_alert", default=False)

    @field_validator('*', mode='before')
    @classmethod
    def parse_toggle(cls, v: Any) -> Any:
        """Accept yes/no, true/false, on/off and 1/0 in any case"""
        if isinstance(v, str):
            text = v.strip().lower()
            if text in _TRUE_STRINGS:
                return True
            if text in _FALSE_STRINGS:
                return False
            raise ValueError(f"Alert toggle must be 'yes' or 'no', got {v!r}")
        return v

    @field_serializer('*')
    def serialize_toggle(self, v: bool) -> str:
        return "yes" if v else "no"


class AlertingThreshold(Section):
    """Limits at which the alerter fires"""
    # Alert when connected peers fall below this count
    num_peers_threshold: int = setting("num_peers_threshold", default=0, rules="gte=0")
    # Alert when consecutive missed blocks reach this count
    missed_blocks_threshold: int = setting("missed_blocks_threshold", default=0, rules="gte=0")
    # Alert when network and validator heights differ by this many blocks
    block_diff_threshold: int = setting("block_diff_threshold", default=0, rules="gte=0")
    # Alert when the ETH balance falls below this amount
    eth_balance_threshold: float = setting("eth_balance_threshold", default=0.0, rules="gte=0")


class Scraper(Section):
    """Polling intervals written as duration strings, e.g. 30s or 1m"""
    rate: str = setting("rate", rules="required,duration")
    validator_rate: str = setting("validator_rate", rules="required,duration")
    contract_rate: str = setting("contract_rate", rules="required,duration")
    commands_rate: str = setting("tg_commnads_rate", rules="required,duration")


class Telegram(Section):
    """Telegram bot credentials"""
    bot_token: Secret = setting("tg_bot_token", rules="required")
    chat_id: int = setting("tg_chat_id", default=0, rules="required")


class SendGrid(Section):
    """SendGrid credentials for email alerts"""
    token: Secret = setting("sendgrid_token", rules="required")
    # Address that receives every alert
    receiver_email_address: str = setting("receiver_email_address", rules="required,email")
    sendgrid_email: str = setting("account_email", rules="required,email")
    sendgrid_name: str = setting("sendgrid_account_name", rules="required")


class InfluxDB(Section):
    """InfluxDB connection settings"""
    port: str = setting("port", rules="required,port")
    ip: str = setting("ip", rules="required")
    database: str = setting("database", rules="required")
    username: str = setting("username")
    password: Secret = setting("password")


class Config(Section):
    """Complete application configuration"""
    endpoints: Endpoints = setting("rpc_and_lcd_endpoints", default_factory=Endpoints)
    val_details: ValDetails = setting("validator_details", default_factory=ValDetails)
    enable_alerts: EnableAlerts = setting("enable_alerts", default_factory=EnableAlerts)
    regular_status_alerts: RegularStatusAlerts = setting(
        "regular_status_alerts", default_factory=RegularStatusAlerts
    )
    alerter_preferences: AlerterPreferences = setting(
        "alerter_preferences", default_factory=AlerterPreferences
    )
    alerting_thresholds: AlertingThreshold = setting(
        "alerting_threholds", default_factory=AlertingThreshold
    )
    scraper: Scraper = setting("scraper", default_factory=Scraper)
    telegram: Telegram = setting("telegram", default_factory=Telegram)
    sendgrid: SendGrid = setting("sendgrid", default_factory=SendGrid)
    influxdb: InfluxDB = setting("influxdb", default_factory=InfluxDB)

    @classmethod
    def sections(cls) -> List[Tuple[str, str]]:
        """(attribute, file key) pairs of the top-level sections"""
        return [(name, field.alias or name) for name, field in cls.model_fields.items()]

    def violations(self, exclude: Iterable[str] = ()) -> List[Violation]:
        """List every constraint violation outside the excluded fields"""
        return collect_violations(self, exclude)

    def validate_config(self, exclude: Iterable[str] = ()) -> None:
        """
        Check all constraint tags, skipping excluded sections or fields.

        Exclusions name a section ("Telegram", "telegram") or a single
        field ("telegram.tg_bot_token"). Raises ValidationError listing
        every violation found.
        """
        exclude = list(exclude)
        violations = self.violations(exclude)
        if violations:
            logger.debug(f"Config validation found {len(violations)} violation(s)")
            raise ValidationError(violations)
        if exclude:
            logger.debug(f"Config valid (excluding {', '.join(exclude)})")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a dictionary keyed like the config file"""
        return self.model_dump(by_alias=True)

    @classmethod
    def from_dict(cls, data: Dict[str, Any], source: Optional[Path] = None) -> 'Config':
        """Map a parsed key tree onto the schema"""
        try:
            return cls.model_validate(data)
        except PydanticValidationError as e:
            errors = [
                (".".join(str(part) for part in err["loc"]), err["msg"])
                for err in e.errors()
            ]
            raise MappingError(errors, source) from e
