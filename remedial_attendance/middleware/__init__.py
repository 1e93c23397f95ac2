from .request_id import RequestIDMiddleware
