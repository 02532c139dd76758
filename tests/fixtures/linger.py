import subprocess
import sys

# The grandchild inherits stdout/stderr and keeps them open after we exit.
subprocess.Popen([sys.executable, "-c", "import time; time.sleep(1.5)"])
print("done")
