"""CLI constants and configuration."""

from prompt_toolkit.styles import Style

COMMANDS = [
    "register", "login", "logout", "whoami", "ls", "mkdir", "upload", "download",
    "trash", "restore", "rm", "trash-list", "empty-trash",
    "share", "unshare", "open-share", "stats", "clear", "exit", "help",
]

STYLE = Style.from_dict(
    {
        "prompt": "#FF6A00 bold",
        "command": "#0088ff bold",
    }
)

FIRE_ORANGE = "\033[38;2;255;106;0m"
GREEN = "\033[32m"
RESET = "\033[0m"

LOGO = f"""{FIRE_ORANGE}
  ██████╗ ██╗       ██████╗  ██╗   ██╗ ██████╗  ███████╗ ██╗ ██████╗  ███████╗
 ██╔════╝ ██║      ██╔═══██╗ ██║   ██║ ██╔══██╗ ██╔════╝ ██║ ██╔══██╗ ██╔════╝
 ██║      ██║      ██║   ██║ ██║   ██║ ██║  ██║ █████╗   ██║ ██████╔╝ █████╗
 ██║      ██║      ██║   ██║ ██║   ██║ ██║  ██║ ██╔══╝   ██║ ██╔══██╗ ██╔══╝
 ╚██████╗ ███████╗ ╚██████╔╝ ╚██████╔╝ ██████╔╝ ██║      ██║ ██║  ██║ ███████╗
  ╚═════╝ ╚══════╝  ╚═════╝   ╚═════╝  ╚═════╝  ╚═╝      ╚═╝ ╚═╝  ╚═╝ ╚══════╝
{RESET}"""

WELCOME_TITLE = "CloudFire CLI - Personal Cloud Storage"
WELCOME_HELP = "Type 'help' for commands or 'exit' to quit.\n"

PROMPT_TEXT = "cloudfire> "

HELP_TEXT = """Available commands:
  register <username> <password> [email]   Register new user account
  login <username> <password>              Login and get API key
  logout                                   Forget the stored API key
  whoami                                   Show current account and quota
  ls [folder_id]                           List files and folders (default: root)
  mkdir <name> [folder_id]                 Create a folder
  upload <path> [folder_id]                Upload a local file
  download <file_id> [output_path]         Download a file (default: current directory)
  trash <file_id>                          Move a file to the trash
  restore <file_id>                        Restore a file from the trash
  rm <file_id>                             Permanently delete a file
  trash-list                               Show the trash
  empty-trash                              Permanently delete everything in the trash
  share <file_id>                          Create a public share link
  unshare <file_id>                        Revoke the share link
  open-share <token>                       Show a shared file by its token
  stats                                    System statistics (admin only)
  clear                                    Clear screen and redisplay welcome message
  help                                     Show this help
  exit                                     Exit REPL

Examples:
  register alice mypassword123 alice@example.com
  login alice mypassword123
  mkdir photos
  upload ~/Pictures/beach.jpg 3f2a9c1e-...
  share 8d1e7b20-...
  download 8d1e7b20-... downloads/"""
