# Overview: Closed set of role tags and the roles granting each capability.

"""
Role tags are the only strings ever matched against a caller. Matching is
exact membership: no wildcards and no hierarchy, so merchantManager does not
imply merchantOwner and eventManager does not imply sellerManager.

Manager roles (eventManager, sellerManager) are granted by the event
document's admins / sellerManagers arrays. Every other role comes from the
"roles" array of the caller's user document.
"""


class Role:
    """Role tags stored on user documents (and implied by event manager arrays)."""
    EVENT_MANAGER = "eventManager"
    SELLER_MANAGER = "sellerManager"
    MERCHANT_MANAGER = "merchantManager"
    MERCHANT_OWNER = "merchantOwner"
    MERCHANT_ASIST = "merchantAsist"
    CASHIER = "cashier"
    SELLER = "seller"
    POINT_SELLER = "pointSeller"
    CUSTOMER = "customer"


VALID_ROLES = (
    Role.EVENT_MANAGER,
    Role.SELLER_MANAGER,
    Role.MERCHANT_MANAGER,
    Role.MERCHANT_OWNER,
    Role.MERCHANT_ASIST,
    Role.CASHIER,
    Role.SELLER,
    Role.POINT_SELLER,
    Role.CUSTOMER,
)

# Granted only through the event document's embedded arrays
MANAGER_ROLES = frozenset({Role.EVENT_MANAGER, Role.SELLER_MANAGER})


# Capability code -> roles granting it, in preferred (acting-as) order.
# The first role the caller holds becomes the role recorded in audit fields.
CAPABILITY_ROLES = {
    "CONFIRM_SELLER_CASH": (Role.SELLER_MANAGER,),
    "CANCEL_MERCHANT_PAYMENT": (Role.MERCHANT_OWNER, Role.MERCHANT_ASIST),
    "TOGGLE_MERCHANT_STATUS": (Role.MERCHANT_MANAGER, Role.EVENT_MANAGER, Role.MERCHANT_OWNER),
    "ASSIGN_MERCHANT_ASIST": (Role.MERCHANT_MANAGER,),
    "QUERY_POINT_CARD": (Role.MERCHANT_OWNER, Role.MERCHANT_ASIST, Role.POINT_SELLER, Role.EVENT_MANAGER),
    "VIEW_SELLER_MANAGER_DASHBOARD": (Role.SELLER_MANAGER,),
    "VIEW_CUSTOMER_DASHBOARD": (Role.CUSTOMER,),
    "RESET_DAILY_REVENUE": (Role.EVENT_MANAGER,),
}
