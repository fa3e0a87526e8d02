"""Declarative documents for running Ahoi on Kubernetes.

Nothing here talks to a cluster. Each builder returns a Kubernetes client
model object; ``render`` turns a list of them into YAML that can be piped
into ``kubectl apply -f -``.
"""
import base64
import json

import yaml
from kubernetes import client

from ahoi.config import CONTAINER_PORT

STRATEGIES = ("RollingUpdate", "Recreate")


def labels(name):
    return {"app": name}


def _metadata(name):
    return client.V1ObjectMeta(name=name, labels=labels(name))


def _b64(raw):
    return base64.b64encode(raw.encode()).decode()


# --- Credentials ---
def registry_secret(name, server, username, password, email=None):
    """Image pull secret in the ``.dockerconfigjson`` format."""
    auth = {
        "username": username,
        "password": password,
        "auth": _b64(f"{username}:{password}"),
    }
    if email:
        auth["email"] = email
    config_json = json.dumps({"auths": {server: auth}})

    return client.V1Secret(
        api_version="v1",
        kind="Secret",
        metadata=_metadata(name),
        type="kubernetes.io/dockerconfigjson",
        data={".dockerconfigjson": _b64(config_json)},
    )


# --- Workloads ---
def _pod_spec(name, image, cpu_request=None, cpu_limit=None, pull_secret=None):
    resources = None
    if cpu_request or cpu_limit:
        resources = client.V1ResourceRequirements(
            requests={"cpu": cpu_request} if cpu_request else None,
            limits={"cpu": cpu_limit} if cpu_limit else None,
        )

    container = client.V1Container(
        name=name,
        image=image,
        ports=[client.V1ContainerPort(container_port=CONTAINER_PORT)],
        resources=resources,
    )
    pull_secrets = [client.V1LocalObjectReference(name=pull_secret)] if pull_secret else None
    return client.V1PodSpec(containers=[container], image_pull_secrets=pull_secrets)


def pod(name, image, cpu_request=None, cpu_limit=None, pull_secret=None):
    """A single bare pod, handy for poking at the service by hand."""
    return client.V1Pod(
        api_version="v1",
        kind="Pod",
        metadata=_metadata(name),
        spec=_pod_spec(name, image, cpu_request, cpu_limit, pull_secret),
    )


def deployment(
    name,
    image,
    replicas=3,
    strategy="RollingUpdate",
    max_surge=1,
    max_unavailable=0,
    cpu_request=None,
    cpu_limit=None,
    pull_secret=None,
):
    """Desired state: replica count plus how replicas get replaced on update.

    ``RollingUpdate`` swaps pods a few at a time with old and new overlapping;
    ``Recreate`` kills every old pod before starting the new ones.
    """
    if strategy not in STRATEGIES:
        raise ValueError(f"Unknown update strategy {strategy!r}, expected one of {STRATEGIES}")
    if replicas < 0:
        raise ValueError("replicas must not be negative")

    rolling_update = None
    if strategy == "RollingUpdate":
        rolling_update = client.V1RollingUpdateDeployment(
            max_surge=max_surge,
            max_unavailable=max_unavailable,
        )

    return client.V1Deployment(
        api_version="apps/v1",
        kind="Deployment",
        metadata=_metadata(name),
        spec=client.V1DeploymentSpec(
            replicas=replicas,
            selector=client.V1LabelSelector(match_labels=labels(name)),
            strategy=client.V1DeploymentStrategy(type=strategy, rolling_update=rolling_update),
            template=client.V1PodTemplateSpec(
                metadata=client.V1ObjectMeta(labels=labels(name)),
                spec=_pod_spec(name, image, cpu_request, cpu_limit, pull_secret),
            ),
        ),
    )


def autoscaler(name, min_replicas=1, max_replicas=10, target_cpu_percent=50):
    """Scales the deployment on CPU usage relative to the pods' CPU request.

    The controller samples utilization on its own interval (30s by default);
    the pods need a CPU request for the percentage to mean anything.
    """
    if min_replicas < 1 or min_replicas > max_replicas:
        raise ValueError(f"Invalid replica range {min_replicas}..{max_replicas}")
    if target_cpu_percent < 1:
        raise ValueError(f"target_cpu_percent must be positive, got {target_cpu_percent}")

    return client.V1HorizontalPodAutoscaler(
        api_version="autoscaling/v1",
        kind="HorizontalPodAutoscaler",
        metadata=_metadata(name),
        spec=client.V1HorizontalPodAutoscalerSpec(
            scale_target_ref=client.V1CrossVersionObjectReference(
                api_version="apps/v1",
                kind="Deployment",
                name=name,
            ),
            min_replicas=min_replicas,
            max_replicas=max_replicas,
            target_cpu_utilization_percentage=target_cpu_percent,
        ),
    )


# --- Networking ---
def service(name, port=CONTAINER_PORT, service_type="NodePort"):
    """Exposes the pods labelled ``app=<name>`` on a cluster assigned port."""
    return client.V1Service(
        api_version="v1",
        kind="Service",
        metadata=_metadata(name),
        spec=client.V1ServiceSpec(
            type=service_type,
            selector=labels(name),
            ports=[client.V1ServicePort(port=port, target_port=CONTAINER_PORT, protocol="TCP")],
        ),
    )


def ingress(name, host, path="/", port=CONTAINER_PORT):
    backend = client.V1IngressBackend(
        service=client.V1IngressServiceBackend(
            name=name,
            port=client.V1ServiceBackendPort(number=port),
        )
    )
    rule = client.V1IngressRule(
        host=host,
        http=client.V1HTTPIngressRuleValue(
            paths=[client.V1HTTPIngressPath(path=path, path_type="Prefix", backend=backend)]
        ),
    )
    return client.V1Ingress(
        api_version="networking.k8s.io/v1",
        kind="Ingress",
        metadata=_metadata(name),
        spec=client.V1IngressSpec(rules=[rule]),
    )


def render(objects):
    """Multi-document YAML, keys in the camelCase the API server expects."""
    api = client.ApiClient()
    docs = [api.sanitize_for_serialization(obj) for obj in objects]
    return yaml.safe_dump_all(docs, sort_keys=False)
