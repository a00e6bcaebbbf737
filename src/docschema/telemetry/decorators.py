from opentelemetry import trace
import functools


def traced_class(metodos=None):
    """Decorador para instrumentar los métodos públicos de una clase con spans."""

    def decorator(cls):
        tracer = trace.get_tracer(cls.__module__)

        target_methods = metodos or [
            name for name in vars(cls) if not name.startswith("_") and callable(getattr(cls, name))
        ]

        for method_name in target_methods:
            if hasattr(cls, method_name):
                original_method = getattr(cls, method_name)

                def create_traced_method(original, name):
                    @functools.wraps(original)
                    def sync_wrapper(self, *args, **kwargs):
                        with tracer.start_as_current_span(f"{cls.__name__}.{name}") as span:
                            span.set_attribute("method_name", name)
                            if args and isinstance(args[0], type):
                                span.set_attribute("target_class", args[0].__name__)
                            return original(self, *args, **kwargs)

                    return sync_wrapper

                setattr(cls, method_name, create_traced_method(original_method, method_name))

        return cls

    return decorator
