from __future__ import annotations

import os
from typing import Optional
from urllib.parse import urlparse

from eth_account import Account
from eth_utils import is_address, to_checksum_address
from pydantic import BaseModel, computed_field, field_validator


class Settings(BaseModel):
    rpc_url: str
    private_key: str
    state_address: str
    router_address: str
    bls_domain_hex: str
    bls_secret_hex: Optional[str] = None
    chain_id: Optional[int] = None
    receipt_timeout: float = 120.0

    @computed_field  # type: ignore[prop-decorator]
    @property
    def address(self) -> str:
        """Checksummed address derived from the private key."""
        return Account.from_key(self.private_key).address

    @property
    def bls_domain(self) -> bytes:
        return bytes.fromhex(self.bls_domain_hex.removeprefix("0x"))

    @field_validator("rpc_url")
    @classmethod
    def validate_rpc_url(cls, v: str) -> str:
        if not v:
            raise ValueError("RPC URL cannot be empty")
        parsed = urlparse(v)
        if parsed.scheme not in {"http", "https"}:
            raise ValueError("RPC URL must start with http:// or https://")
        if not parsed.netloc:
            raise ValueError("RPC URL must include a host")
        return v

    @field_validator("private_key")
    @classmethod
    def validate_private_key(cls, v: str) -> str:
        """Validate that the private key loads as an Ethereum account."""
        if not v:
            raise ValueError("Private key cannot be empty")
        try:
            Account.from_key(v)
        except Exception as e:
            raise ValueError(f"Invalid private key: {e}") from e
        return v

    @field_validator("state_address", "router_address")
    @classmethod
    def validate_contract_address(cls, v: str) -> str:
        if not is_address(v):
            raise ValueError(f"Invalid contract address: {v!r}")
        return to_checksum_address(v)

    @field_validator("bls_domain_hex")
    @classmethod
    def validate_bls_domain_hex(cls, v: str) -> str:
        try:
            domain = bytes.fromhex(v.removeprefix("0x"))
        except ValueError as e:
            raise ValueError(f"BLS domain is not hex: {e}") from e
        if len(domain) != 32:
            raise ValueError("BLS domain must be 32 bytes")
        return v

    @field_validator("receipt_timeout")
    @classmethod
    def validate_receipt_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("Receipt timeout must be positive")
        return v


def get_settings() -> Settings:
    rpc_url = os.environ.get("SCALED_RPC_URL")
    private_key = os.environ.get("SCALED_PRIVATE_KEY")
    state_address = os.environ.get("SCALED_STATE_ADDRESS")
    router_address = os.environ.get("SCALED_ROUTER_ADDRESS")
    bls_domain_hex = os.environ.get("SCALED_BLS_DOMAIN")
    if not (
        rpc_url and private_key and state_address and router_address and bls_domain_hex
    ):
        raise ValueError(
            "SCALED_RPC_URL, SCALED_PRIVATE_KEY, SCALED_STATE_ADDRESS, "
            "SCALED_ROUTER_ADDRESS and SCALED_BLS_DOMAIN are required"
        )
    chain_id = os.environ.get("SCALED_CHAIN_ID")
    return Settings(
        rpc_url=rpc_url,
        private_key=private_key,
        state_address=state_address,
        router_address=router_address,
        bls_domain_hex=bls_domain_hex,
        bls_secret_hex=os.environ.get("SCALED_BLS_SECRET") or None,
        chain_id=int(chain_id) if chain_id else None,
        receipt_timeout=float(os.environ.get("SCALED_RECEIPT_TIMEOUT", "120")),
    )
