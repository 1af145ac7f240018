"""Well-known identifiers shared by every execution spec adapter.

These values are part of the contract with the recurring-run controller and
the workflow engine. They are module-level ``Final`` constants: loaded once at
import, never mutated.
"""

from __future__ import annotations

from typing import Final

# ── Recurring schedule (owner of generated runs) ─────────────────────────
SCHEDULED_WORKFLOW_API_GROUP: Final = "kubeflow.org"
SCHEDULED_WORKFLOW_API_VERSION: Final = "kubeflow.org/v1beta1"
SCHEDULED_WORKFLOW_KIND: Final = "ScheduledWorkflow"

# ── Labels written by the schedule controller ────────────────────────────
LABEL_KEY_PREFIX: Final = "scheduledworkflows.kubeflow.org/"
LABEL_KEY_IS_OWNED_BY_SCHEDULED_WORKFLOW: Final = LABEL_KEY_PREFIX + "isOwnedByScheduledWorkflow"
LABEL_KEY_SCHEDULED_WORKFLOW_NAME: Final = LABEL_KEY_PREFIX + "scheduledWorkflowName"
LABEL_KEY_WORKFLOW_EPOCH: Final = LABEL_KEY_PREFIX + "workflowEpoch"
LABEL_KEY_WORKFLOW_INDEX: Final = LABEL_KEY_PREFIX + "workflowIndex"

# Set by the backend once a terminal status has been stored.
LABEL_KEY_PERSISTED_FINAL_STATE: Final = "pipeline/persistedFinalState"

# ── Reference engine (Argo) ──────────────────────────────────────────────
WORKFLOW_API_GROUP: Final = "argoproj.io"
WORKFLOW_API_VERSION: Final = "argoproj.io/v1alpha1"
WORKFLOW_KIND: Final = "Workflow"

# Engine-side template variable resolving to the resource's own UID.
WORKFLOW_UID_PLACEHOLDER: Final = "{{workflow.uid}}"

# Kubernetes resource-name ceiling applied to generateName prefixes.
MAX_GENERATE_NAME_LENGTH: Final = 200
