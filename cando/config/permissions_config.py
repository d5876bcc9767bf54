"""
Company Roles and Permissions Configuration
This config defines which company-level actions each team role may perform.
The membership row in company_users stores the role; the matrix below is
resolved in-process when the frontend asks what a member may do.
"""

from typing import Dict, List, Optional

# Every company-scoped action
PERMISSIONS = {
    "update_company_profile": "Edit the public company profile",
    "update_legal_info": "Edit registration, tax and legal details",
    "manage_team": "Invite, promote and remove team members",
    "view_rfqs": "View requests for quotation",
    "create_rfqs": "Publish requests for quotation",
    "respond_to_rfqs": "Submit quotes against other companies' RFQs",
    "manage_rfqs": "Close RFQs and accept or reject quotes",
    "update_social_profile": "Edit the company social presence",
    "post_updates": "Post to the feed as the company",
    "manage_connections": "Send and answer company connection requests",
}

ROLE_TYPES = {
    "OWNER": {
        "permissions": list(PERMISSIONS),
        "description": "Full control of the company"
    },
    "ADMIN": {
        "permissions": [p for p in PERMISSIONS if p != "update_legal_info"],
        "description": "Everything except legal information"
    },
    "RFQ_MANAGER": {
        "permissions": ["view_rfqs", "create_rfqs", "respond_to_rfqs", "manage_rfqs"],
        "description": "Runs the company's procurement"
    },
    "SOCIAL_MANAGER": {
        "permissions": ["view_rfqs", "update_social_profile", "post_updates", "manage_connections"],
        "description": "Runs the company's social presence"
    },
    "MEMBER": {
        "permissions": ["view_rfqs"],
        "description": "Read-only team member"
    },
}

# company_users.role values and the role type they resolve to
MEMBERSHIP_ROLES = {
    "owner": "OWNER",
    "admin": "ADMIN",
    "member": "MEMBER",
    "viewer": "MEMBER",
}

ADMIN_MEMBERSHIP_ROLES = ("owner", "admin")


def resolve_role_type(role: Optional[str]) -> Optional[str]:
    """Map a stored role (membership or role type, any case) to a ROLE_TYPES key."""
    if not role:
        return None
    if role.upper() in ROLE_TYPES:
        return role.upper()
    return MEMBERSHIP_ROLES.get(role.lower())


def get_role_permissions(role: Optional[str]) -> Dict[str, bool]:
    """Return {permission: allowed} for every known permission."""
    role_type = resolve_role_type(role)
    granted = set(ROLE_TYPES[role_type]["permissions"]) if role_type else set()
    return {name: name in granted for name in PERMISSIONS}


def get_permission_matrix() -> Dict[str, List[dict]]:
    """
    Returns the full matrix for display in the team settings page.
    Format: {
        "permissions": [{"name": "manage_team", "description": "..."}, ...],
        "roles": [{"name": "ADMIN", "description": "...", "permissions": [...]}, ...]
    }
    """
    return {
        "permissions": [
            {"name": name, "description": description}
            for name, description in PERMISSIONS.items()
        ],
        "roles": [
            {
                "name": role_name,
                "description": role_config["description"],
                "permissions": sorted(role_config["permissions"])
            }
            for role_name, role_config in ROLE_TYPES.items()
        ]
    }
