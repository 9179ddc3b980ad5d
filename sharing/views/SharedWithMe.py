from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from accounts.authentication import CustomJWEAuthentication
from ..services.shares import share_service


class SharedWithMeAPIView(APIView):
    authentication_classes = [CustomJWEAuthentication]
    permission_classes = [IsAuthenticated]

    def get(self, request):
        shared = share_service.shared_with_me(request.user, request.query_params.get("type") or None)
        return Response({"count": len(shared), "shared": shared})


class SharedByMeAPIView(APIView):
    authentication_classes = [CustomJWEAuthentication]
    permission_classes = [IsAuthenticated]

    def get(self, request):
        shared = share_service.shared_by_me(request.user, request.query_params.get("type") or None)
        return Response({"count": len(shared), "shared": shared})


class AllSharedAPIView(APIView):
    authentication_classes = [CustomJWEAuthentication]
    permission_classes = [IsAuthenticated]

    def get(self, request):
        return Response(share_service.all_shared(request.user))
