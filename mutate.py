import functools
import logging
import pydantic

from flask import Flask, request, jsonify, current_app

from models import (
    BaseModel,
    AdmissionReview,
    AdmissionResponse,
    Namespace,
    Patch,
    PatchAction,
    PatchType,
    Pod,
)

from providers import KubernetesProvider
from exc import (
    ApplicationError,
    InvalidRequestError,
    NamespaceLookupError,
    PatchError,
    ResponseError,
)

LOG = logging.getLogger(__name__)


class DEFAULTS:
    ANNOTATION = "k8s-mutate-nodeselector.skpr.io/namespace"
    PROVIDER = KubernetesProvider
    KUBECONFIG = None
    HOST = "0.0.0.0"
    PORT = 8443
    CERT = None
    KEY = None
    LOG_LEVEL = "INFO"


NODE_SELECTOR_PATH = "/spec/nodeSelector"


def jsonresponse():
    """Transforms the response from a view function into a JSON object."""

    def _outer(func):
        @functools.wraps(func)
        def _inner(*args, **kwargs):
            res = func(*args, **kwargs)
            try:
                if isinstance(res, BaseModel):
                    return jsonify(res.model_dump(mode="json", exclude_none=True))
                else:
                    return jsonify(res)
            except (TypeError, ValueError) as err:
                LOG.error("failed to encode admission review response: %s", err)
                raise ResponseError("failed to encode admission review response")

        return _inner

    return _outer


def node_selector_from_annotations(annotations, annotation):
    """Parse the node selector stored in a namespace annotation.

    The annotation value is a comma separated list of key=value pairs. Entries
    that do not split into exactly one key and one value are dropped. A
    missing annotation yields an empty selector.
    """

    node_selector: dict[str, str] = {}

    if not annotations or annotation not in annotations:
        return node_selector

    for flat_selector in annotations[annotation].split(","):
        kv = flat_selector.split("=")

        if len(kv) != 2:
            LOG.warning(
                "ignoring malformed node selector %r in annotation %s",
                flat_selector,
                annotation,
            )
            continue

        node_selector[kv[0]] = kv[1]

    return node_selector


def lookup_namespace(provider, name) -> Namespace:
    if not name:
        raise NamespaceLookupError("failed to get namespace: pod has no namespace")

    try:
        return provider.get_namespace(name)
    except Exception as err:
        LOG.error("failed to get namespace %s: %s", name, err)
        raise NamespaceLookupError(f"failed to get namespace {name}: {err}")


def node_selector_patch(node_selector) -> Patch:
    try:
        return Patch(
            [
                PatchAction(
                    op="add",
                    path=NODE_SELECTOR_PATH,
                    value=node_selector,
                )
            ]
        )
    except pydantic.ValidationError as err:
        LOG.error("failed to create patch: %s", err)
        raise PatchError("failed to create patch")


def review_response(review, response) -> AdmissionReview:
    """Wrap a response in an envelope matching the identity of the request."""

    return AdmissionReview(
        apiVersion=review.apiVersion,
        kind=review.kind,
        response=response,
    )


def mutate(review, provider, annotation) -> AdmissionReview:
    """Decide on a single admission review.

    The pod is always allowed. When the pod's namespace carries a node
    selector annotation, the response includes a patch setting the pod's
    nodeSelector to that selector.
    """

    if review.request is None:
        raise InvalidRequestError("admission review does not contain a request")

    pod = Pod.model_validate(review.request.object)
    namespace_name = pod.metadata.namespace or review.request.namespace

    # Lookup the Pod's Namespace and check if it has the annotation set.
    namespace = lookup_namespace(provider, namespace_name)
    node_selector = node_selector_from_annotations(
        namespace.metadata.annotations, annotation
    )

    # No changes needed; return Allowed response without a patch
    if not node_selector:
        LOG.info(
            "no node selector for namespace %s (uid %s)",
            namespace_name,
            review.request.uid,
        )
        return review_response(
            review,
            AdmissionResponse(
                uid=review.request.uid,
                allowed=True,
            ),
        )

    patch = node_selector_patch(node_selector)

    try:
        response = AdmissionResponse(
            uid=review.request.uid,
            allowed=True,
            patchType=PatchType.JSONPatch,
            patch=patch,
        )
    except pydantic.ValidationError as err:
        LOG.error("failed to encode patch: %s", err)
        raise PatchError("failed to create patch")

    LOG.info(
        "assigning node selector %s to pod in namespace %s (uid %s)",
        node_selector,
        namespace_name,
        review.request.uid,
    )
    return review_response(review, response)


@jsonresponse()
def mutate_pod():
    LOG.info("received webhook mutate request")

    review = AdmissionReview.model_validate(request.get_json())
    res = mutate(review, current_app.provider, current_app.config["ANNOTATION"])

    LOG.info("completed webhook mutate request (uid %s)", review.request.uid)
    return res


def handle_validationerror(err):
    return str(err), 400, {"content-type": "text/plain"}


def handle_applicationerror(err):
    return str(err), err.status_code, {"content-type": "text/plain"}


def health():
    return "OK", 200, {"content-type": "text/plain"}


def create_app(**config) -> Flask:
    """Use an application factory [1] to create the Flask app.

    Configuration is layered: the DEFAULTS class, then environment variables
    prefixed with K8S_MUTATE_NODESELECTOR_, then any keyword arguments.

    [1]: https://flask.palletsprojects.com/en/3.0.x/patterns/appfactories/
    """

    app = Flask(__name__)
    app.config.from_object(DEFAULTS)
    app.config.from_prefixed_env("K8S_MUTATE_NODESELECTOR")
    if config:
        app.config.update(config)

    if not app.config.get("ANNOTATION"):
        LOG.error("Missing annotation configuration")
        exit(1)

    app.provider = app.config["PROVIDER"](kubeconfig=app.config["KUBECONFIG"])

    app.errorhandler(pydantic.ValidationError)(handle_validationerror)
    app.errorhandler(ApplicationError)(handle_applicationerror)
    app.add_url_rule("/healthz", view_func=health)
    app.add_url_rule("/mutate", view_func=mutate_pod, methods=["POST"])

    return app
