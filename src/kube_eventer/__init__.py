"""
kube_eventer: Kubernetes event forwarding sinks.

Subpackages:
    sinks      - Sink protocol, factory, and the EventBridge sink

Flow:
    collector batch → EventBridgeSink.export_events → BatchExporter
        → EventTranslator (per event) → EventBridgeTransport (per chunk of 16)
        → EventBridgeClientManager (client + credential refresh) → PutEvents

Dependencies:
    - core.*: Reusable components (auth, errors, logging, metadata)
    - alibabacloud-eventbridge: EventBridge SDK
    - pydantic: Event and envelope schemas
"""

__version__ = "0.1.0"
