from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework import permissions
from accounts.authentication import CustomJWEAuthentication
from files.serializers import TrashItemSerializer
from files.services.trash import TrashService
from ..params import int_param


class ListTrashAPIView(APIView):
    authentication_classes = [CustomJWEAuthentication]
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        page = TrashService().list_items(
            request.user,
            item_type=request.query_params.get("type") or None,
            limit=int_param(request, "limit", 50),
            offset=int_param(request, "offset", 0),
        )
        return Response({
            "items": TrashItemSerializer(page["items"], many=True).data,
            "total": page["total"],
            "limit": page["limit"],
            "offset": page["offset"],
        })
