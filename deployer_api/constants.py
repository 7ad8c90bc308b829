"""API-wide constants for the demo deployer."""

# Placeholder returned instead of a stored secret
MASKED_SECRET = "***"

# Advisory error stored on a component whose primary step failed
PIPELINE_FAILED_MESSAGE = "Playbook failed. Check the logs."

# Advisory error stored when the cluster reports every pod as failing
PODS_FAILING_MESSAGE = "Pods are failing. Check the logs."

# Step purpose whose output may carry a service-account token
ACCESS_CONTROL_PURPOSE = "access-control"

# Runner action used to delete a component namespace
CLEANUP_ACTION = "cleanup.yml"

# Ports the deploy playbook already exposes without an explicit service_port
DEFAULT_SERVICE_PORTS = (8080, 3000)

# Pod phases treated as failing by the cluster status probe
FAILED_POD_PHASES = ("CrashLoopBackOff", "Error", "Failed")

# Trailing output lines logged when a step fails
ERROR_CONTEXT_LINES = 20

# Workload env vars rewritten by the token refresh
BEARER_TOKEN_ENV = "K8S_BEARER_TOKEN"
API_URL_ENV = "K8S_API_URL"
