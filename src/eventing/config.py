import os

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

WORKER_LIMIT = int(os.getenv("WORKER_LIMIT", "5"))
POSTING_ENABLED = os.getenv("POSTING_ENABLED", "false").lower() == "true"
SERVER_TIMEOUT = int(os.getenv("SERVER_TIMEOUT", "60"))

# Where ClusterChannelProvisioners are served from
PROVISIONER_GROUP = os.getenv("PROVISIONER_GROUP", "eventing.knative.dev")
PROVISIONER_VERSION = os.getenv("PROVISIONER_VERSION", "v1alpha1")
PROVISIONER_PLURAL = "clusterchannelprovisioners"
