import click

from ahoi import config, manifests
from ahoi.handlers import hostname, index
from ahoi.responder import Responder

responder = Responder(__name__)
app = responder.app
app.logger.setLevel(config.LOG_LEVEL)

# --- Routes ---
responder.register("/", index)
responder.register("/hostname", hostname)


# --- Deployment documents ---
@app.cli.command("manifests")
@click.option("--name", default=config.APP_NAME, show_default=True)
@click.option("--image", default=config.IMAGE, show_default=True)
@click.option("--replicas", default=3, show_default=True, type=int)
@click.option("--strategy", default="RollingUpdate", show_default=True, type=click.Choice(manifests.STRATEGIES))
@click.option("--cpu-request", help="e.g. 100m")
@click.option("--cpu-limit", help="e.g. 200m")
@click.option("--autoscale/--no-autoscale", default=False)
@click.option("--min-replicas", default=1, show_default=True, type=int)
@click.option("--max-replicas", default=10, show_default=True, type=int)
@click.option("--cpu-percent", default=50, show_default=True, type=int)
@click.option("--host", help="Hostname to route to the service through an Ingress.")
@click.option("--pull-secret", help="Name of an existing image pull secret.")
@click.option("--pod", is_flag=True, help="Also emit a bare Pod to poke at by hand.")
def manifests_command(
    name,
    image,
    replicas,
    strategy,
    cpu_request,
    cpu_limit,
    autoscale,
    min_replicas,
    max_replicas,
    cpu_percent,
    host,
    pull_secret,
    pod,
):
    """Print the Kubernetes documents for Ahoi as YAML."""
    if autoscale and not cpu_request:
        raise click.UsageError("--autoscale needs --cpu-request, utilization is measured against it")

    objects = []
    if config.REGISTRY_USER:
        pull_secret = pull_secret or f"{name}-registry"
        objects.append(
            manifests.registry_secret(
                pull_secret,
                config.REGISTRY_SERVER,
                config.REGISTRY_USER,
                config.REGISTRY_PASSWORD or "",
                config.REGISTRY_EMAIL,
            )
        )

    try:
        objects.append(
            manifests.deployment(
                name,
                image,
                replicas=replicas,
                strategy=strategy,
                cpu_request=cpu_request,
                cpu_limit=cpu_limit,
                pull_secret=pull_secret,
            )
        )
        objects.append(manifests.service(name))
        if pod:
            objects.append(
                manifests.pod(
                    f"{name}-pod",
                    image,
                    cpu_request=cpu_request,
                    cpu_limit=cpu_limit,
                    pull_secret=pull_secret,
                )
            )
        if autoscale:
            objects.append(
                manifests.autoscaler(
                    name,
                    min_replicas=min_replicas,
                    max_replicas=max_replicas,
                    target_cpu_percent=cpu_percent,
                )
            )
    except ValueError as e:
        raise click.UsageError(str(e))

    if host:
        objects.append(manifests.ingress(name, host))

    click.echo(manifests.render(objects), nl=False)


def main():
    responder.serve(config.LISTEN_ADDRESS)


if __name__ == "__main__":
    main()
