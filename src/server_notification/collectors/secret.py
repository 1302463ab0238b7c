"""Shared secret lookup in the build server's global variables."""

from __future__ import annotations

import logging

from server_notification.build_log import BuildAuditLog
from server_notification.results import VariableDefinitionManager

logger = logging.getLogger(__name__)

# The name contains "PASSWORD" so the build server masks the value in its UI.
SECRET_VARIABLE_NAME = "SERVER_PLUGIN_SECRET_PASSWORD"
SECRET_NOT_DEFINED = "SERVER_PLUGIN_SECRET_PASSWORD-NOT-DEFINED"
NO_GLOBAL_VARIABLES = "NO-GLOBAL-VARIABLES-ARE-DEFINED"


def resolve_secret(
    variable_manager: VariableDefinitionManager,
    audit_log: BuildAuditLog,
) -> str:
    """Return the shared secret sent with every notification.

    The receiver uses the secret to check that the request comes from a
    legitimate build server. A missing secret is reported through a
    sentinel value instead of an error, so the receiver can tell apart an
    empty variable store from a missing variable.

    Args:
        variable_manager: Store holding the global variables.
        audit_log: Build log for diagnostics.

    Returns:
        The secret value, SECRET_NOT_DEFINED or NO_GLOBAL_VARIABLES.
    """
    variables = variable_manager.get_global_variables()
    if not variables:
        audit_log.error("No global variables are defined")
        logger.warning("No global variables are defined")
        return NO_GLOBAL_VARIABLES

    for variable in variables:
        if variable.key == SECRET_VARIABLE_NAME:
            return variable.value

    audit_log.error(f"Variable {SECRET_VARIABLE_NAME} is not defined")
    logger.warning(f"Variable {SECRET_VARIABLE_NAME} is not defined")
    return SECRET_NOT_DEFINED
