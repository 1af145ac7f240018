"""
Tests for the Workflow adapter.

Tests verify:
- Construction from bytes and from typed resources
- Every submission-time mutation (name, parameters, owner, labels, UID)
- Template derivation and structural validation
- Status-time lookups return empty values instead of raising
"""

import json

import pytest

from execspec.core.errors import InvalidInputError, ValidationError
from execspec.execution import ExecutionType, Workflow
from execspec.execution.models import (
    Arguments,
    Artifact,
    NodeStatus,
    ObjectMeta,
    OwnerReference,
    Outputs,
    Parameter,
    S3Artifact,
    ScheduledWorkflow,
    Template,
    TemplateMetadata,
    WorkflowResource,
    WorkflowSpec,
    WorkflowStatus,
)

REPLACE_UID_YAML = b"""\
apiVersion: argoproj.io/v1alpha1
kind: Workflow
metadata:
  generateName: k8s-owner-reference-
spec:
  entrypoint: k8s-owner-reference
  templates:
  - name: k8s-owner-reference
    resource:
      action: create
      manifest: |
        apiVersion: v1
        kind: ConfigMap
        metadata:
          generateName: owned-eg-
          ownerReferences:
          - apiVersion: argoproj.io/v1alpha1
            blockOwnerDeletion: true
            kind: Workflow
            name: "{{workflow.name}}"
            uid: "{{workflow.uid}}"
        data:
          some: value
"""


def _owned_by(**ref) -> Workflow:
    return Workflow(
        WorkflowResource(metadata=ObjectMeta(name="WORKFLOW_NAME", owner_references=[OwnerReference(**ref)]))
    )


def _with_artifacts(nodes: dict) -> Workflow:
    return Workflow(WorkflowResource(metadata=ObjectMeta(name="run"), status=WorkflowStatus(nodes=nodes)))


# =============================================================================
# CONSTRUCTION
# =============================================================================


class TestConstruction:
    def test_from_bytes(self, labelled_resource):
        wf = Workflow.from_bytes(Workflow(labelled_resource).to_yaml())
        assert wf.get() == labelled_resource

    def test_from_bytes_empty(self):
        with pytest.raises(InvalidInputError, match="empty input"):
            Workflow.from_bytes(b"")

    def test_from_object_shares_resource(self, labelled_resource):
        wf = Workflow.from_object(labelled_resource)
        wf.set_labels("new", "label")
        assert labelled_resource.metadata.labels["new"] == "label"

    def test_from_object_wrong_type(self):
        with pytest.raises(InvalidInputError) as exc_info:
            Workflow.from_object(ScheduledWorkflow())
        assert exc_info.value.context.metadata["received_type"] == "ScheduledWorkflow"

    def test_type_tag(self, named_resource):
        assert Workflow(named_resource).execution_type() == ExecutionType.WORKFLOW

    def test_equality(self, labelled_resource):
        copy = labelled_resource.model_copy(deep=True)
        assert Workflow(labelled_resource) == Workflow(copy)
        copy.metadata.name = "OTHER"
        assert Workflow(labelled_resource) != Workflow(copy)

    def test_repr(self, named_resource):
        assert repr(Workflow(named_resource)) == "Workflow(name='WORKFLOW_NAME')"

    def test_unhashable(self, named_resource):
        with pytest.raises(TypeError):
            hash(Workflow(named_resource))


# =============================================================================
# MUTATION
# =============================================================================


class TestOverrideName:
    def test_replaces_name(self, named_resource):
        wf = Workflow(named_resource)
        wf.override_name("NEW_WORKFLOW_NAME")
        assert wf.get().to_dict() == {"metadata": {"name": "NEW_WORKFLOW_NAME"}, "spec": {}}

    def test_clears_generate_name(self):
        wf = Workflow(WorkflowResource(metadata=ObjectMeta(generate_name="hello-")))
        wf.set_execution_name("hello-abc12")
        assert wf.get().metadata.generate_name is None
        assert wf.execution_name() == "hello-abc12"


class TestOverrideParameters:
    def test_value_filled_in(self):
        wf = Workflow(
            WorkflowResource(
                metadata=ObjectMeta(name="NAME"),
                spec=WorkflowSpec(arguments=Arguments(parameters=[Parameter(name="PARAM1")])),
            )
        )
        wf.override_parameters({"PARAM1": "VALUE1"})
        assert wf.parameters() == {"PARAM1": "VALUE1"}

    def test_only_declared_changed(self, parameterized_resource):
        wf = Workflow(parameterized_resource)
        wf.override_parameters({"PARAM1": "OVERRIDE1", "PARAM5": "", "PARAM9": "NEW"})

        assert wf.parameters() == {
            "PARAM1": "OVERRIDE1",
            "PARAM2": "VALUE2",
            "PARAM3": "NEW_VALUE3",
            "PARAM5": "",
        }
        assert [p.name for p in wf.get().spec.arguments.parameters] == ["PARAM1", "PARAM2", "PARAM3", "PARAM5"]

    def test_empty_string_override_is_kept(self, parameterized_resource):
        wf = Workflow(parameterized_resource)
        wf.override_parameters({"PARAM2": ""})
        assert wf.parameters()["PARAM2"] == ""

    def test_none_and_empty_are_noops(self, parameterized_resource):
        before = parameterized_resource.model_copy(deep=True)
        wf = Workflow(parameterized_resource)
        wf.override_parameters(None)
        wf.override_parameters({})
        assert wf.get() == before

    def test_no_declared_parameters(self, named_resource):
        wf = Workflow(named_resource)
        wf.override_parameters({"PARAM1": "x"})
        assert wf.parameters() == {}
        assert wf.get().spec.arguments is None

    def test_order_preserved(self, parameterized_resource):
        wf = Workflow(parameterized_resource)
        wf.override_parameters({"PARAM3": "c", "PARAM1": "a"})
        assert list(wf.parameters()) == ["PARAM1", "PARAM2", "PARAM3", "PARAM5"]


class TestVerifyParameters:
    def test_declared(self, parameterized_resource):
        Workflow(parameterized_resource).verify_parameters({"PARAM1": "x", "PARAM5": "y"})

    def test_empty_passes(self, named_resource):
        Workflow(named_resource).verify_parameters(None)
        Workflow(named_resource).verify_parameters({})

    def test_undeclared(self, parameterized_resource):
        with pytest.raises(ValidationError) as exc_info:
            Workflow(parameterized_resource).verify_parameters({"PARAM1": "x", "PARAM9": "y", "PARAM8": "z"})

        error = exc_info.value
        assert str(error) == "ValidationError: Unrecognized input parameter: PARAM8"
        assert error.unknown_parameters == ["PARAM8", "PARAM9"]
        assert error.context.parameter == "PARAM8"

    def test_does_not_mutate(self, parameterized_resource):
        before = parameterized_resource.model_copy(deep=True)
        with pytest.raises(ValidationError):
            Workflow(parameterized_resource).verify_parameters(["NOPE"])
        assert parameterized_resource == before


class TestSetOwnerReferences:
    def test_single_controller_reference(self, named_resource):
        wf = Workflow(named_resource)
        wf.set_owner_references(ScheduledWorkflow(metadata=ObjectMeta(name="SCHEDULE_NAME")))

        assert wf.get().to_dict()["metadata"]["ownerReferences"] == [
            {
                "apiVersion": "kubeflow.org/v1beta1",
                "kind": "ScheduledWorkflow",
                "name": "SCHEDULE_NAME",
                "controller": True,
                "blockOwnerDeletion": True,
            }
        ]

    def test_replaces_existing(self):
        wf = _owned_by(api_version="v1", kind="ConfigMap", name="old", uid="1")
        wf.set_owner_references(ScheduledWorkflow(metadata=ObjectMeta(name="s", uid="SWF_UID")))

        refs = wf.get().metadata.owner_references
        assert len(refs) == 1
        assert refs[0].uid == "SWF_UID"
        assert wf.scheduled_workflow_uuid_as_string_or_empty() == "SWF_UID"

    def test_wire_names(self, named_resource):
        wf = Workflow(named_resource)
        wf.set_owner_references(ScheduledWorkflow(metadata=ObjectMeta(name="s", uid="u")))
        ref = wf.get().to_dict()["metadata"]["ownerReferences"][0]
        assert ref["apiVersion"] == "kubeflow.org/v1beta1"
        assert ref["blockOwnerDeletion"] is True

    def test_rejects_non_schedule(self, named_resource):
        with pytest.raises(InvalidInputError):
            Workflow(named_resource).set_owner_references({"metadata": {"name": "s"}})


class TestLabelsAndAnnotations:
    def test_set_labels(self, named_resource):
        wf = Workflow(named_resource)
        wf.set_labels("key", "value")
        assert wf.get() == WorkflowResource(metadata=ObjectMeta(name="WORKFLOW_NAME", labels={"key": "value"}))

    def test_set_labels_overwrites(self, labelled_resource):
        wf = Workflow(labelled_resource)
        wf.set_labels("key", "other")
        assert wf.get().metadata.labels == {"key": "other"}

    def test_set_annotations(self, named_resource):
        wf = Workflow(named_resource)
        wf.set_annotations("note", "hi")
        assert wf.get().metadata.annotations == {"note": "hi"}

    def test_labels_to_all_templates(self, named_resource):
        named_resource.spec.templates = [
            Template(metadata=TemplateMetadata()),
            Template(name="b"),
            Template(name="c", metadata=TemplateMetadata(labels={"keep": "me"})),
        ]
        wf = Workflow(named_resource)
        wf.set_labels_to_all_templates("key", "value")

        labels = [t.metadata.labels for t in wf.get().spec.templates]
        assert labels == [{"key": "value"}, {"key": "value"}, {"keep": "me", "key": "value"}]

    def test_labels_to_all_templates_without_templates(self, named_resource):
        wf = Workflow(named_resource)
        wf.set_labels_to_all_templates("key", "value")
        assert wf.get().spec.templates is None

    def test_annotations_to_all_templates(self, named_resource):
        named_resource.spec.templates = [Template(name="a")]
        wf = Workflow(named_resource)
        wf.set_annotations_to_all_templates("note", "x")
        assert wf.get().spec.templates[0].metadata.annotations == {"note": "x"}

    def test_pod_metadata_labels(self, named_resource):
        wf = Workflow(named_resource)
        wf.set_pod_metadata_labels("pipeline/runid", "r1")
        assert wf.get().to_dict()["spec"]["podMetadata"] == {"labels": {"pipeline/runid": "r1"}}

    def test_canonical_labels(self, named_resource):
        wf = Workflow(named_resource)
        wf.set_canonical_labels("SCHEDULED_WORKFLOW_NAME", 100, 50)

        assert wf.get().metadata.labels == {
            "scheduledworkflows.kubeflow.org/isOwnedByScheduledWorkflow": "true",
            "scheduledworkflows.kubeflow.org/scheduledWorkflowName": "SCHEDULED_WORKFLOW_NAME",
            "scheduledworkflows.kubeflow.org/workflowEpoch": "100",
            "scheduledworkflows.kubeflow.org/workflowIndex": "50",
        }
        assert wf.scheduled_at_in_sec_or_0() == 100

    def test_persisted_final_state(self, named_resource):
        wf = Workflow(named_resource)
        assert not wf.is_persisted_final_state()
        wf.mark_persisted_final_state()
        assert wf.is_persisted_final_state()


class TestReplaceUID:
    def test_substitutes_inside_manifest(self):
        wf = Workflow.from_bytes(REPLACE_UID_YAML)
        wf.replace_uid("12345")

        expected = Workflow.from_bytes(REPLACE_UID_YAML.replace(b'"{{workflow.uid}}"', b'"12345"'))
        assert wf == expected
        assert '"{{workflow.name}}"' in wf.get().spec.templates[0].model_extra["resource"]["manifest"]

    def test_no_placeholder_is_noop(self, named_resource):
        wf = Workflow(named_resource)
        wf.replace_uid("12345")
        assert wf.get() is named_resource

    def test_uid_is_escaped(self):
        wf = Workflow.from_bytes(REPLACE_UID_YAML)
        wf.replace_uid('a"b')
        manifest = wf.get().spec.templates[0].model_extra["resource"]["manifest"]
        assert 'uid: "a"b"' in manifest
        json.loads(wf.to_string_for_store())


class TestGetExecutionSpec:
    def test_template_from_named_run(self, labelled_resource):
        labelled_resource.metadata.namespace = "kubeflow"
        labelled_resource.metadata.uid = "UID"
        template = Workflow(labelled_resource).get_execution_spec()

        assert isinstance(template, Workflow)
        assert template.get() == WorkflowResource(
            api_version="argoproj.io/v1alpha1",
            kind="Workflow",
            metadata=ObjectMeta(generate_name="WORKFLOW_NAME"),
            spec=WorkflowSpec(arguments=Arguments(parameters=[Parameter(name="PARAM", value="VALUE")])),
        )

    def test_truncates_generate_name(self):
        long_name = "THIS_NAME_IS_GREATER_THAN_200_CHARACTERS_" * 6
        wf = Workflow(WorkflowResource(metadata=ObjectMeta(name=long_name)))
        template = wf.get_execution_spec()
        assert template.get().metadata.generate_name == long_name[:200]
        assert len(template.get().metadata.generate_name) == 200

    def test_independent_copy(self, parameterized_resource):
        wf = Workflow(parameterized_resource)
        template = wf.get_execution_spec()
        template.override_parameters({"PARAM1": "changed"})
        assert wf.parameters()["PARAM1"] == "NEW_VALUE1"


class TestValidate:
    def _workflow(self, **meta) -> Workflow:
        return Workflow(
            WorkflowResource(
                metadata=ObjectMeta(**meta),
                spec=WorkflowSpec(entrypoint="main", templates=[Template(name="main")]),
            )
        )

    def test_valid(self):
        self._workflow(name="run").validate()
        self._workflow(generate_name="run-").validate()

    def test_name_and_generate_name(self):
        with pytest.raises(InvalidInputError, match="exactly one of"):
            self._workflow(name="run", generate_name="run-").validate()

    def test_neither_name(self):
        with pytest.raises(InvalidInputError, match="exactly one of"):
            self._workflow().validate()

    def test_duplicate_parameters(self):
        wf = self._workflow(name="run")
        wf.get().spec.arguments = Arguments(parameters=[Parameter(name="a"), Parameter(name="a")])
        with pytest.raises(InvalidInputError, match="duplicate parameter names: a"):
            wf.validate()

    def test_duplicate_templates(self):
        wf = self._workflow(name="run")
        wf.get().spec.templates.append(Template(name="main"))
        with pytest.raises(InvalidInputError, match="duplicate template names: main"):
            wf.validate()

    def test_missing_entrypoint(self, named_resource):
        with pytest.raises(InvalidInputError, match="spec.entrypoint is required"):
            Workflow(named_resource).validate()

    def test_dangling_entrypoint(self):
        wf = self._workflow(name="run")
        wf.get().spec.entrypoint = "nope"
        with pytest.raises(InvalidInputError, match="does not name a template"):
            wf.validate()

    def test_ignore_entrypoint(self, named_resource):
        Workflow(named_resource).validate(ignore_entrypoint=True)


# =============================================================================
# INTROSPECTION
# =============================================================================


class TestScheduledWorkflowUUID:
    def test_base_case(self):
        wf = _owned_by(api_version="kubeflow.org/v1beta1", kind="ScheduledWorkflow", name="S", uid="MY_UID")
        assert wf.scheduled_workflow_uuid_as_string_or_empty() == "MY_UID"
        assert wf.has_scheduled_workflow_as_parent()

    @pytest.mark.parametrize(
        "ref",
        [
            {"api_version": "kubeflow.org/v1beta1", "uid": "MY_UID"},
            {"api_version": "kubeflow.org/v1beta1", "kind": "WRONG_KIND", "name": "S", "uid": "MY_UID"},
            {"kind": "ScheduledWorkflow", "name": "S", "uid": "MY_UID"},
            {"api_version": "kubeflow.org/v1beta1", "kind": "ScheduledWorkflow", "name": "S"},
        ],
        ids=["no-kind", "wrong-kind", "no-api-version", "no-uid"],
    )
    def test_not_a_schedule_parent(self, ref):
        wf = _owned_by(**ref)
        assert wf.scheduled_workflow_uuid_as_string_or_empty() == ""
        assert not wf.has_scheduled_workflow_as_parent()

    def test_no_owner(self, named_resource):
        assert Workflow(named_resource).scheduled_workflow_uuid_as_string_or_empty() == ""


class TestScheduledAt:
    def test_base_case(self, named_resource):
        named_resource.metadata.labels = {"scheduledworkflows.kubeflow.org/workflowEpoch": "100"}
        assert Workflow(named_resource).scheduled_at_in_sec_or_0() == 100

    def test_no_epoch_label(self, named_resource):
        named_resource.metadata.labels = {"scheduledworkflows.kubeflow.org/workflowIndex": "50"}
        assert Workflow(named_resource).scheduled_at_in_sec_or_0() == 0

    def test_no_labels(self, named_resource):
        assert Workflow(named_resource).scheduled_at_in_sec_or_0() == 0

    def test_unparseable(self, named_resource):
        named_resource.metadata.labels = {"scheduledworkflows.kubeflow.org/workflowEpoch": "soon"}
        assert Workflow(named_resource).scheduled_at_in_sec_or_0() == 0


class TestCondition:
    def test_running(self):
        wf = Workflow(WorkflowResource.model_validate({"status": {"phase": "Running"}}))
        assert wf.condition() == "Running"
        assert not wf.is_in_final_state()

    @pytest.mark.parametrize("phase", ["Succeeded", "Failed", "Error"])
    def test_final(self, phase):
        wf = Workflow(WorkflowResource.model_validate({"status": {"phase": phase}}))
        assert wf.condition() == phase
        assert wf.is_in_final_state()

    def test_no_status(self, named_resource):
        wf = Workflow(named_resource)
        assert wf.condition() == ""
        assert not wf.is_in_final_state()

    def test_empty_status(self):
        assert Workflow(WorkflowResource(status=WorkflowStatus())).condition() == ""

    def test_message(self, labelled_resource, named_resource):
        assert Workflow(labelled_resource).message() == "I AM A MESSAGE"
        assert Workflow(named_resource).message() == ""


class TestIdentity:
    def test_name_prefers_name(self):
        wf = Workflow(WorkflowResource(metadata=ObjectMeta(name="a", generate_name="b-")))
        assert wf.execution_name() == "a"

    def test_name_falls_back_to_generate_name(self):
        assert Workflow(WorkflowResource(metadata=ObjectMeta(generate_name="b-"))).execution_name() == "b-"

    def test_empty_identity(self):
        wf = Workflow(WorkflowResource())
        assert wf.execution_name() == ""
        assert wf.execution_namespace() == ""
        assert wf.execution_uid() == ""


class TestFindArtifactKey:
    def test_found(self):
        wf = _with_artifacts(
            {
                "node-1": NodeStatus(
                    outputs=Outputs(artifacts=[Artifact(name="artifact-1", s3=S3Artifact(key="expected/path"))])
                )
            }
        )
        assert wf.find_object_store_artifact_key_or_empty("node-1", "artifact-1") == "expected/path"

    def test_artifact_not_found(self):
        wf = _with_artifacts(
            {
                "node-1": NodeStatus(
                    outputs=Outputs(artifacts=[Artifact(name="artifact-2", s3=S3Artifact(key="foo/bar"))])
                )
            }
        )
        assert wf.find_object_store_artifact_key_or_empty("node-1", "artifact-1") == ""

    def test_node_not_found(self):
        wf = _with_artifacts({})
        assert wf.find_object_store_artifact_key_or_empty("node-1", "artifact-1") == ""

    def test_no_status(self, named_resource):
        assert Workflow(named_resource).find_object_store_artifact_key_or_empty("n", "a") == ""

    def test_non_object_store_location(self):
        wf = _with_artifacts({"node-1": NodeStatus(outputs=Outputs(artifacts=[Artifact(name="a")]))})
        assert wf.find_object_store_artifact_key_or_empty("node-1", "a") == ""


# =============================================================================
# SERIALIZATION
# =============================================================================


class TestSerialization:
    def test_to_string_for_store(self, named_resource):
        assert Workflow(named_resource).to_string_for_store() == '{"metadata":{"name":"WORKFLOW_NAME"},"spec":{}}'

    def test_round_trip(self, labelled_resource):
        wf = Workflow(labelled_resource)
        restored = Workflow.from_bytes(wf.to_string_for_store())
        assert restored == wf
        assert restored.to_string_for_store() == wf.to_string_for_store()

    def test_yaml_round_trip(self, labelled_resource):
        wf = Workflow(labelled_resource)
        assert Workflow.from_bytes(wf.to_yaml()) == wf

    def test_content_hash_tracks_content(self, parameterized_resource):
        wf = Workflow(parameterized_resource)
        before = wf.content_hash()
        assert wf.content_hash() == before
        wf.override_parameters({"PARAM1": "changed"})
        assert wf.content_hash() != before
