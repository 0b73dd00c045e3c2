"""Local stand-ins for database functions the hosted schema exposes over RPC."""
from backend.local import register_procedure


@register_procedure("log_admin_action")
def log_admin_action(backend, p_admin_id, p_action_type, p_target_type, p_target_id, p_old_values=None, p_new_values=None):
    row = backend.insert(
        "audit_logs",
        {
            "admin_id": p_admin_id,
            "action_type": p_action_type,
            "target_type": p_target_type,
            "target_id": str(p_target_id),
            "old_values": p_old_values,
            "new_values": p_new_values,
        },
    )
    return row["id"]
