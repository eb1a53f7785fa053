"""
Roles and Permissions Configuration
Defines which resource actions each user role may perform.
Routes depend on require_permission("<resource>:<action>") and the role
carried in the session token is looked up here.
"""

# Resources and their actions
MODULES = {
    "bins": {
        "resource": "bins",
        "actions": ["create", "read", "update", "delete"],
        "description": "Trash bin registry"
    },
    "notifications": {
        "resource": "notifications",
        "actions": ["create", "read", "update", "delete"],
        "description": "Bin alerts"
    },
    "actions": {
        "resource": "actions",
        "actions": ["create", "read"],
        "description": "Operational action history"
    },
    "users": {
        "resource": "users",
        "actions": ["read", "update", "assign_role"],
        "description": "User profile management"
    }
}

# Role definitions: actions granted per resource
ROLE_TYPES = {
    "public": {
        "grants": {
            "bins": ["read"],
            "notifications": ["read", "update", "delete"],
            "actions": ["create", "read"],
        },
        "description": "Citizen access: monitoring and reporting"
    },
    "officer": {
        "grants": {
            "bins": ["create", "read", "update", "delete"],
            "notifications": ["create", "read", "update", "delete"],
            "actions": ["create", "read"],
        },
        "description": "Field officer: bin management and monitoring"
    },
    "admin": {
        "grants": {module_name: list(module_config["actions"]) for module_name, module_config in MODULES.items()},
        "description": "Full administrative access"
    }
}

DEFAULT_ROLE = "public"


def get_role_permissions(role: str) -> list:
    """Return the sorted permission names ("bins:read", ...) for a role. Unknown roles get nothing."""
    role_config = ROLE_TYPES.get(role)
    if not role_config:
        return []
    permissions = []
    for module_name, actions in role_config["grants"].items():
        resource = MODULES[module_name]["resource"]
        for action in actions:
            if action in MODULES[module_name]["actions"]:
                permissions.append(f"{resource}:{action}")
    return sorted(permissions)
