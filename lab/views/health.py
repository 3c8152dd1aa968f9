from django.conf import settings
from django.db import connections
from django.http import JsonResponse


def healthz(request):
    backend = getattr(settings, 'LAB_STORAGE_BACKEND', 'orm')
    if backend != 'orm':
        return JsonResponse({'ok': True, 'storage': backend})
    try:
        with connections['default'].cursor() as c:
            c.execute('SELECT 1')
            row = c.fetchone()
        return JsonResponse({'ok': True, 'storage': backend, 'db': bool(row and row[0] == 1)})
    except Exception as e:
        return JsonResponse({'ok': False, 'storage': backend, 'error': str(e)}, status=500)
