"""
Key registration transactions.
"""

from typing import Optional, Union

from algotx.core.transaction import KeyRegistrationFields, TransactionType
from algotx.tx.builder import TransactionBuilder, b64_to_bytes

KeyLike = Union[bytes, str]


def _key(value: Optional[KeyLike]) -> Optional[bytes]:
    # Participation keys are usually distributed as base64.
    if isinstance(value, str):
        return b64_to_bytes(value)
    return value


class KeyRegistrationTransactionBuilder(TransactionBuilder):
    """
    Builds online and offline key registrations.

    Going online needs vote key, selection key, vote first/last and key
    dilution together. Leaving them all unset takes the account offline;
    non_participation() additionally marks it as never participating.
    """

    TYPE = TransactionType.KEY_REGISTRATION
    FIELDS = KeyRegistrationFields

    def vote_key(self, key: Optional[KeyLike]) -> "KeyRegistrationTransactionBuilder":
        return self._set("vote_key", _key(key))

    def selection_key(self, key: Optional[KeyLike]) -> "KeyRegistrationTransactionBuilder":
        return self._set("selection_key", _key(key))

    def state_proof_key(self, key: Optional[KeyLike]) -> "KeyRegistrationTransactionBuilder":
        return self._set("state_proof_key", _key(key))

    def vote_first(self, round_number: Optional[int]) -> "KeyRegistrationTransactionBuilder":
        return self._set("vote_first", round_number)

    def vote_last(self, round_number: Optional[int]) -> "KeyRegistrationTransactionBuilder":
        return self._set("vote_last", round_number)

    def vote_key_dilution(self, dilution: Optional[int]) -> "KeyRegistrationTransactionBuilder":
        return self._set("vote_key_dilution", dilution)

    def non_participation(self, flag: Optional[bool] = True) -> "KeyRegistrationTransactionBuilder":
        return self._set("non_participation", flag)
