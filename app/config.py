import os

# Maximum number of directory levels below root
MAX_DEPTH = 3

# File extensions accepted when creating files through the shell
SUPPORTED_EXTENSIONS = (".yaml", ".yml", ".json", ".kyaml")

# Home directory of the host shell user
HOST_HOME = "/home/kube"

# Symbol shown at the start of every prompt
PROMPT_SYMBOL = "☸"

# Number of log lines kept for `debug logs`
LOG_BUFFER_SIZE = 500

LOG_LEVEL = os.environ.get("SHELL_LOG_LEVEL", "INFO").upper()
