"""
Script de verificación previo al uso de la CLI de tallas
Verifica configuración, estructura y dependencias
"""
import sys
from pathlib import Path


def verify_setup():
    """Verifica la configuración antes de ejecutar main.py"""

    print("=" * 70)
    print("VERIFICACIÓN DE CONFIGURACIÓN - Inventario de tallas")
    print("=" * 70)
    print()

    errors = []
    warnings = []

    # 1. Verificar .env
    print("1. Verificando archivo de configuración...")
    env_file = Path('.env')
    if env_file.exists():
        print("   ✓ Archivo .env encontrado")

        with open(env_file, 'r', encoding='utf-8') as f:
            env_content = f.read()

        if 'API_BASE_URL' in env_content:
            print("   ✓ API_BASE_URL configurado")
        else:
            errors.append("   ✗ API_BASE_URL no encontrado en .env")

        for var in ['API_TOKEN', 'API_USUARIO_ID']:
            if var in env_content:
                print(f"   ✓ {var} configurado")
            else:
                warnings.append(f"   ⚠ {var} no configurado (requerido para registrar movimientos)")
    else:
        errors.append("   ✗ Archivo .env no encontrado")

    print()

    # 2. Verificar estructura de directorios
    print("2. Verificando estructura de directorios...")
    required_dirs = ['config', 'core', 'models', 'inventario', 'flujos', 'api', 'processors']
    for dir_name in required_dirs:
        if Path(dir_name).exists():
            print(f"   ✓ Directorio {dir_name}/ encontrado")
        else:
            errors.append(f"   ✗ Directorio {dir_name}/ no encontrado")

    print()

    # 3. Verificar módulos Python
    print("3. Verificando módulos Python instalados...")
    required_modules = ['pandas', 'numpy', 'requests', 'pydantic', 'openpyxl', 'python-dotenv', 'python-jose']
    import_names = {'python-dotenv': 'dotenv', 'python-jose': 'jose'}
    for module in required_modules:
        import_name = import_names.get(module, module)
        try:
            __import__(import_name)
            print(f"   ✓ {module} instalado")
        except ImportError:
            errors.append(f"   ✗ {module} no instalado")

    print()

    # 4. Test de importación de módulos del proyecto
    print("4. Verificando módulos del proyecto...")
    for module in ['config.api', 'inventario.reconciliacion', 'api.client', 'flujos.devoluciones',
                   'flujos.ventas']:
        try:
            __import__(module)
            print(f"   ✓ {module} importado correctamente")
        except Exception as e:
            errors.append(f"   ✗ Error importando {module}: {e}")

    print()

    # 5. Configuración cargada
    print("5. Cargando configuración de API...")
    try:
        from config.api import ApiConfig
        config = ApiConfig.from_env()
        print(f"   ✓ {config}")
    except Exception as e:
        errors.append(f"   ✗ Error cargando configuración: {e}")

    print()
    print("=" * 70)

    # Resumen
    if errors:
        print("❌ ERRORES ENCONTRADOS:")
        for error in errors:
            print(error)
        print()

    if warnings:
        print("⚠️  ADVERTENCIAS:")
        for warning in warnings:
            print(warning)
        print()

    if not errors and not warnings:
        print("✅ VERIFICACIÓN COMPLETA - Todo listo!")
        print()
        print("Comando sugerido:")
        print("  python main.py --reporte --debug")
        return True
    elif not errors:
        print("✅ VERIFICACIÓN COMPLETA CON ADVERTENCIAS")
        print("   La CLI puede ejecutarse, pero revisa las advertencias.")
        return True
    else:
        print("❌ VERIFICACIÓN FALLIDA")
        print("   Corrige los errores antes de ejecutar.")
        return False


if __name__ == "__main__":
    success = verify_setup()
    sys.exit(0 if success else 1)
