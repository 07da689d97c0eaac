"""
Local private-key signer backed by eth_account.
"""
from typing import Any, Dict, List

from eth_account import Account
from eth_account.signers.local import LocalAccount


class LocalSigner:
    """Signer holding a private key in memory"""

    def __init__(self, private_key: str):
        self.account: LocalAccount = Account.from_key(private_key)
        self.address = self.account.address

    async def sign_typed_data(
        self,
        domain: Dict[str, Any],
        types: Dict[str, List[Dict[str, str]]],
        message: Dict[str, Any],
    ) -> bytes:
        signed = self.account.sign_typed_data(
            domain_data=domain,
            message_types=types,
            message_data=message,
        )
        return bytes(signed.signature)
