# /mobilehub/utils/request_utils.py
from fastapi import Request

def get_remote_address(request: Request) -> str:
    """
    Client IP used for rate limiting and security logs. Behind the reverse
    proxy the first X-Forwarded-For hop is the real client.
    """
    forwarded_for = request.headers.get("x-forwarded-for")
    if forwarded_for:
        first_hop = forwarded_for.split(",")[0].strip()
        if first_hop:
            return first_hop
    if request.client and request.client.host:
        return request.client.host
    return "127.0.0.1"
