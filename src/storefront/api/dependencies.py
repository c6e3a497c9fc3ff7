"""Request identity, as resolved by the upstream Identity/Session Provider.

The provider authenticates the caller and forwards the result in headers.
This service trusts them as is and does not verify credentials.
"""

from fastapi import Header, HTTPException

from storefront.access import Requester
from storefront.utils.logging import add_context


async def current_requester(
    x_user_id: str = Header(default=""),
    x_user_role: str = Header(default=""),
) -> Requester:
    if not x_user_id:
        raise HTTPException(status_code=401, detail="Authentication required")

    requester = Requester.resolve(x_user_id, x_user_role or None)
    add_context(user_id=requester.user_id, role=requester.role.value)
    return requester
