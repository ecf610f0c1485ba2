import argparse
import logging

import mutate

LOG = logging.getLogger(__name__)


def parse_args(argv=None):
    """Parse command line flags.

    Flags left unset fall back to the K8S_MUTATE_NODESELECTOR_* environment
    variables and then to the application defaults.
    """

    parser = argparse.ArgumentParser(
        prog="k8s-mutate-nodeselector",
        description="Run the mutating webhook server",
    )
    parser.add_argument("--host", help="Address the webserver listens on")
    parser.add_argument(
        "--port", type=int, help="Port which this webserver will receive requests"
    )
    parser.add_argument("--kubeconfig", help="Path to the kubeconfig file")
    parser.add_argument("--cert", help="Path to the certificate file")
    parser.add_argument("--key", help="Path to the key file")
    parser.add_argument("--log-level", help="Log level (DEBUG, INFO, WARNING, ...)")

    return parser.parse_args(argv)


def config_from_args(args):
    return {
        name.upper(): value for name, value in vars(args).items() if value is not None
    }


def main(argv=None):
    args = parse_args(argv)
    app = mutate.create_app(**config_from_args(args))

    logging.basicConfig(level=app.config["LOG_LEVEL"])

    ssl_context = None
    if app.config["CERT"] and app.config["KEY"]:
        ssl_context = (app.config["CERT"], app.config["KEY"])
    else:
        LOG.warning("no certificate configured, serving plain HTTP")

    LOG.info("starting server on %s:%s", app.config["HOST"], app.config["PORT"])
    app.run(
        host=app.config["HOST"],
        port=app.config["PORT"],
        ssl_context=ssl_context,
    )


if __name__ == "__main__":
    main()
