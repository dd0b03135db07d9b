from typing import Dict

from bootstrapper.result import ReconciliationResult

NAME = "ETCD_NAME"
INITIAL_CLUSTER_STATE = "ETCD_INITIAL_CLUSTER_STATE"
INITIAL_CLUSTER = "ETCD_INITIAL_CLUSTER"


def emit(result: ReconciliationResult) -> Dict[str, str]:
    return {
        NAME: result.name,
        INITIAL_CLUSTER_STATE: result.cluster_state.value,
        INITIAL_CLUSTER: ",".join(result.initial_cluster),
    }
