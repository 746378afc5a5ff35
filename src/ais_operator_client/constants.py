"""Constants for the AIStore operator Kubernetes client."""

# API Group
API_GROUP = "ais.nvidia.com"
API_VERSION = "v1beta1"

# Resource Kinds
KIND_AISTORE = "AIStore"
KIND_STATEFULSET = "StatefulSet"
KIND_SERVICE = "Service"
KIND_CONFIGMAP = "ConfigMap"
KIND_POD = "Pod"
KIND_ROLE = "Role"
KIND_PVC = "PersistentVolumeClaim"
KIND_NAMESPACE = "Namespace"

# Plurals
PLURAL_AISTORE = "aistores"

# Pod phases
POD_PHASE_RUNNING = "Running"

# Field Manager
FIELD_MANAGER = "ais-operator"

# Controller name used in structured logs
CONTROLLER_NAME = "ais-operator"

# Kubernetes API reasons
REASON_ALREADY_EXISTS = "AlreadyExists"
