"""A sample controller and service showing how an application is assembled."""

from __future__ import annotations

from typing import Optional

from winter.component import Component
from winter.http_constants import HttpCode, HttpMethod
from winter.http_request import HttpRequest
from winter.http_response import HttpResponse
from winter.json_deserializer import JsonDeserializeError, JsonDeserializer
from winter.log import get_logger
from winter.reflect import Field, Reflect, ReflectionError
from winter.router import Router


class InnerClass(Reflect):
    """A nested value carried in requests and responses."""

    x = Field("float")
    y = Field("double")
    c = Field("string")


class BaseRequest(Reflect):
    """Body of a request to the home endpoint."""

    number = Field("int")
    type = Field("string")
    inner_class = Field("InnerClass*", key="innerClass")
    values = Field("vector<int>")


class BaseResponse(Reflect):
    """Body of the home endpoint's answer."""

    code = Field("int")
    message = Field("string")
    inner_class = Field("InnerClass*", key="innerClass")
    sum = Field("int")


class MyService(Component):
    """Arithmetic used by the controller."""

    def get_square(self, x: float) -> float:
        return x * x


class MyController(Component):
    """Answers requests to the home endpoint."""

    my_service: MyService

    def __init__(self, my_service: Optional[MyService] = None) -> None:
        self.my_service = my_service
        self._deserializer = JsonDeserializer()

    def home(self, request: HttpRequest) -> HttpResponse:
        """Square the nested numbers, tag the text and sum the list.

        A body that cannot be read, or has no nested object, gets 400.
        """
        log = get_logger()
        try:
            data = self._deserializer.deserialize(request.body, BaseRequest())
        except (JsonDeserializeError, ReflectionError, ValueError) as exc:
            log.error("Invalid request body: {}", exc)
            return HttpResponse(HttpCode.BAD_REQUEST)
        if data.inner_class is None:
            log.error("Request body has no innerClass")
            return HttpResponse(HttpCode.BAD_REQUEST)
        if self.my_service is None:
            raise RuntimeError("MyService has not been wired")

        inner = data.inner_class
        log.info("Received data: number={}, type={}", data.number, data.type)
        log.info("InnerClass: x={}, y={}, c={}", inner.x, inner.y, inner.c)
        log.info("List: {}", data.values)

        result = InnerClass(
            x=self.my_service.get_square(inner.x),
            y=self.my_service.get_square(inner.y),
            c=inner.c + "X2",
        )
        response = BaseResponse(code=0, message="OK", inner_class=result, sum=sum(data.values))
        return HttpResponse(HttpCode.OK, response)


def register_routes(router: Router, controller: MyController) -> None:
    """Register the controller's endpoints with ``router``."""
    router.register_endpoint("/home", HttpMethod.GET, controller.home)