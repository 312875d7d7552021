""" IPv4 prefix length and dotted quad netmask conversions """


def cidr_to_netmask(bits: int) -> str:
    """
    Converts a prefix length into a dotted quad netmask, e.g. 24 -> 255.255.255.0

    Raises:
        ValueError: if bits is not an integer in [0, 32]
    """
    if isinstance(bits, bool) or not isinstance(bits, int):
        raise ValueError(f'Prefix length must be an integer, got {bits!r}')
    if not 0 <= bits <= 32:
        raise ValueError(f'Prefix length must be between 0 and 32, got {bits}')

    octets = []
    for _ in range(4):
        octet_bits = min(bits, 8)
        octets.append(str(256 - (1 << (8 - octet_bits))))
        bits -= octet_bits
    return '.'.join(octets)


def netmask_to_cidr(netmask: str) -> int:
    """
    Converts a dotted quad netmask into a prefix length by counting the set bits of each octet.
    Non-contiguous masks are not rejected: 255.0.255.0 gives 16.

    Raises:
        ValueError: if the netmask is not four integer octets in [0, 255]
    """
    parts = str(netmask).strip().split('.')
    if len(parts) != 4:
        raise ValueError(f'Malformed netmask {netmask}')

    bits = 0
    for part in parts:
        try:
            octet = int(part)
        except ValueError:
            raise ValueError(f'Malformed netmask {netmask}') from None
        if not 0 <= octet <= 255:
            raise ValueError(f'Netmask octet out of range in {netmask}')
        bits += bin(octet).count('1')
    return bits
