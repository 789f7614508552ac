"""
Parser for traceroute text output.
"""

import re
from typing import List, Optional

HOP_LINE = re.compile(r"^\s*\d+\s")
IPV4 = re.compile(r"\b\d{1,3}(?:\.\d{1,3}){3}\b")


def parse_traceroute_line(line: str) -> Optional[str]:
    """
    Extract the responding address from one traceroute output line.

    Only hop lines (starting with the hop number) are considered, so the
    "traceroute to host (addr)" header never counts as a hop. Timeout-only
    lines ("3  * * *") yield None.

    Args:
        line: One line of traceroute / tracert output

    Returns:
        First valid IPv4 address on the line, or None
    """
    if not HOP_LINE.match(line):
        return None
    for candidate in IPV4.findall(line):
        if all(int(octet) <= 255 for octet in candidate.split(".")):
            return candidate
    return None


def parse_traceroute_output(output: str) -> List[str]:
    """
    Parse complete traceroute output into the ordered list of hop addresses.

    Args:
        output: Full stdout of a traceroute run

    Returns:
        Addresses of responding hops, in hop order
    """
    hops = []
    for line in output.splitlines():
        ip = parse_traceroute_line(line)
        if ip:
            hops.append(ip)
    return hops
