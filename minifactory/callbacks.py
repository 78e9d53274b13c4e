import logging

from minifactory.errors import CallbackError

logger = logging.getLogger(__name__)


def execute_callbacks(instance, callbacks, phase):
    for callback in callbacks:
        try:
            callback(instance)
        except CallbackError:
            raise
        except Exception as e:
            raise CallbackError(phase, callback, e) from e


def run_phase(factory, traits, phase, instance):
    """Run one lifecycle phase: selected traits last-to-first, then the factory."""
    for name in reversed(traits):
        trait_factory = factory.traits[name]
        logger.debug("running %s callbacks of trait %s", phase, name)
        execute_callbacks(instance, trait_factory.callbacks[phase], phase)

    execute_callbacks(instance, factory.callbacks[phase], phase)
