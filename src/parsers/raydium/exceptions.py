class RaydiumError(Exception):
    pass


class AddressDecodeError(RaydiumError):
    """Account reference is missing or is not a 32-byte base58 address."""


class InstructionLayoutError(RaydiumError):
    """Instruction account list does not match the initialize2 layout."""
