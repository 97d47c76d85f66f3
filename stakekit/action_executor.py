"""
action_executor.py: Module for executing actions with dry-run support
"""
import logging
from typing import Any, Dict, List

from .utils import error, info, success

logger = logging.getLogger("stakekit.actions")


class ActionExecutor:
    """
    ActionExecutor: Class responsible for executing action plans with dry-run support
    """

    def execute_actions(self, actions: List[Dict[str, Any]], dry_run: bool = False) -> bool:
        """
        Execute a list of actions with optional dry-run
        :param actions: List of action dictionaries
        :param dry_run: Whether to execute in dry-run mode
        :return: True if all actions completed successfully (or if dry_run)
        """
        if not actions:
            info("Nothing to do.")
            return True

        info("Planned actions:")
        for act in actions:
            print(f"  {act['desc']}")

        if dry_run:
            info("DRY RUN: No changes applied")
            return True

        for act in actions:
            func = act['func']
            args = act.get('args', ())
            kwargs = act.get('kwargs', {})
            try:
                func(*args, **kwargs)
            except OSError as e:
                logger.debug(f"Action failed: {act['desc']}", exc_info=True)
                error(f"Failed to execute: {act['desc']} → {e}")
                error("One or more actions failed")
                return False
        success("All actions completed")
        return True
