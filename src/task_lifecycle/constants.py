STATE_DIR_NAME = ".task_lifecycle"
CONFIG_FILE = "config.yaml"

DEFAULT_USER_ID = "user"
DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_NEXT_WEEK_DAYS = 7
DEFAULT_COPY_TITLE_SUFFIX = " (Restored)"
DEFAULT_COPY_TAG = "restored"

# Scenario keys (also the keys of a resolution mapping)
SCENARIO_REQUIRED_SUBTASKS = "required_subtasks"
SCENARIO_DATE_STRATEGY = "date_strategy"
SCENARIO_CREATE_COPY = "create_copy"
SCENARIO_DATE_CONFLICT = "date_conflict"

# Option values
OPTION_CANCEL = "cancel"
OPTION_FORCE_COMPLETE = "force_complete"
OPTION_CREATE_COPY = "create_copy"
OPTION_TREAT_AS_COMPLETED = "treat_as_completed"
OPTION_TREAT_AS_OVERDUE = "treat_as_overdue"

DATE_STRATEGY_TODAY = "today"
DATE_STRATEGY_TOMORROW = "tomorrow"
DATE_STRATEGY_NEXT_WEEK = "next_week"
DATE_STRATEGY_CUSTOM = "custom"
DATE_STRATEGY_NO_DATE = "no_date"


# Activity log actions
ACTION_STATUS_CHANGED = "status_changed"
ACTION_STATUS_FORCED = "status_forced"
ACTION_RESTORED = "restored"
