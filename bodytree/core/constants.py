HIERARCHY_DELIMITER = "/"

# Used as the ancestor of any single-segment joint name.
DEFAULT_ROOT_NAME = "root"

SMOOTHING_WINDOW = 5

TRANSLATION_SIZE = 3
ROTATION_SIZE = 4
