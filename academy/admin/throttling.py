"""
Server-side sign-up throttle

One sign-up attempt per cooldown window, tracked separately per client IP
and per email address. A request is rejected when either key is hot.
"""
from django.conf import settings
from rest_framework.throttling import SimpleRateThrottle


class SignUpRateThrottle(SimpleRateThrottle):
    scope = 'signup'

    def get_rate(self):
        return f"1/{settings.ACADEMY['SIGNUP_COOLDOWN_SECONDS']}s"

    def parse_rate(self, rate):
        # '<requests>/<seconds>s', e.g. '1/45s'
        num, period = rate.split('/')
        return int(num), int(period.rstrip('s'))

    def get_cache_key(self, request, view):
        return self.cache_format % {'scope': self.scope, 'ident': f'ip:{self.get_ident(request)}'}

    def get_cache_keys(self, request, view):
        keys = [self.get_cache_key(request, view)]
        email = request.data.get('email') if hasattr(request.data, 'get') else None
        if email:
            ident = f'email:{str(email).strip().lower()}'
            keys.append(self.cache_format % {'scope': self.scope, 'ident': ident})
        return keys

    def allow_request(self, request, view):
        if request.method != 'POST':
            return True

        self.now = self.timer()
        keys = self.get_cache_keys(request, view)

        histories = {}
        for key in keys:
            history = self.cache.get(key, [])
            while history and history[-1] <= self.now - self.duration:
                history.pop()
            if len(history) >= self.num_requests:
                self.key = key
                self.history = history
                return self.throttle_failure()
            histories[key] = history

        for key, history in histories.items():
            history.insert(0, self.now)
            self.cache.set(key, history, self.duration)

        self.key = keys[0]
        self.history = histories[keys[0]]
        return True
